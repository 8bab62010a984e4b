"""Create, update and delete operations with versioning and cascades."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import structlog

from prompt_mock.core.errors import ConflictError, NotFoundError, ValidationError
from prompt_mock.core.models import (
    ApprovalStatus,
    NotificationItem,
    Prompt,
    PromptActivityEntry,
    PromptApproval,
    PromptComment,
    PromptShare,
    ShareRole,
    ShareTargetType,
    Tenant,
)
from prompt_mock.core.store import EntityStore

logger = structlog.get_logger()

Clock = Callable[[], datetime]

UPDATABLE_PROMPT_FIELDS = ("title", "body", "tags", "metadata", "archived", "created_by")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _owned_by(owner: str, tenant_id: str | None) -> bool:
    """A record is visible without a tenant context, otherwise only to its owner."""
    return tenant_id is None or owner == tenant_id


class MutationPipeline:
    """Every write against the store goes through here."""

    def __init__(
        self,
        store: EntityStore,
        clock: Clock = utc_now,
        default_actor: str = "e2e-user",
    ) -> None:
        self.store = store
        self.clock = clock
        self.default_actor = default_actor

    # --- Tenants ---

    def create_tenant(self, name: str, slug: str) -> Tenant:
        """Create a tenant with an empty partition, dashboard and analytics."""
        if self.store.find_tenant_by_slug(slug):
            raise ConflictError(f"Tenant with slug '{slug}' already exists")
        tenant = Tenant(
            id=self.store.ids.next("tenant"),
            name=name,
            slug=slug,
            created_at=self.clock(),
        )
        self.store.add_tenant(tenant)
        logger.info("tenant.created", tenant_id=tenant.id, slug=slug)
        return tenant

    # --- Prompts ---

    def create_prompt(
        self,
        tenant_id: str | None,
        title: str,
        body: str,
        tags: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
        archived: bool = False,
        created_by: str | None = None,
    ) -> Prompt:
        """Create a prompt at version 1 together with its first snapshot."""
        if not tenant_id:
            raise ValidationError("Missing tenantId")

        now = self.clock()
        prompt = Prompt(
            id=self.store.ids.next("prompt"),
            tenant_id=tenant_id,
            title=title,
            body=body,
            tags=list(tags or []),
            metadata=metadata,
            created_at=now,
            updated_at=now,
            version=1,
            archived=bool(archived),
            created_by=created_by,
        )
        self.store.insert_prompt(prompt, versions=[prompt.snapshot(created_at=now)])
        logger.info("prompt.created", prompt_id=prompt.id, tenant_id=tenant_id)
        return prompt

    def update_prompt(self, prompt_id: str, tenant_id: str | None, **changes: Any) -> Prompt:
        """Merge the supplied fields, bump the version and prepend a snapshot.

        Fields passed as None are treated as not supplied.
        """
        if not tenant_id:
            raise ValidationError("Missing tenantId")
        prompt = self.store.get_prompt(prompt_id, tenant_id)

        applied = {
            key: value
            for key, value in changes.items()
            if key in UPDATABLE_PROMPT_FIELDS and value is not None
        }
        now = self.clock()
        for key, value in applied.items():
            setattr(prompt, key, list(value) if key == "tags" else value)
        prompt.updated_at = now
        prompt.version += 1

        self.store.push_version(prompt.id, prompt.snapshot(created_at=now))
        self._log_activity(
            prompt,
            tenant_id,
            actor=self.default_actor,
            action="updated",
            metadata={"version": prompt.version, "fields": sorted(applied)},
        )
        logger.info(
            "prompt.updated",
            prompt_id=prompt.id,
            version=prompt.version,
            fields=sorted(applied),
        )
        return prompt

    def delete_prompt(self, prompt_id: str, tenant_id: str | None) -> bool:
        """Delete a prompt and its dependants. Absent ids are a no-op."""
        if not tenant_id:
            raise ValidationError("Missing tenantId")
        removed = self.store.remove_prompt(prompt_id, tenant_id)
        logger.info("prompt.deleted", prompt_id=prompt_id, tenant_id=tenant_id, removed=removed)
        return removed

    def record_usage(
        self, prompt_id: str, tenant_id: str | None, authorized: bool = False
    ) -> PromptActivityEntry:
        """Log a usage event. The prompt itself is not modified.

        The actor only reflects whether the caller sent credentials.
        """
        if not tenant_id:
            raise ValidationError("Missing tenantId")
        prompt = self.store.get_prompt(prompt_id, tenant_id)
        return self._log_activity(
            prompt,
            tenant_id,
            actor="authenticated" if authorized else "system",
            action="usage_recorded",
        )

    # --- Comments ---

    def add_comment(
        self,
        prompt_id: str,
        tenant_id: str | None,
        body: str,
        parent_id: str | None = None,
        created_by: str | None = None,
    ) -> PromptComment:
        prompt = self.store.get_prompt(prompt_id, tenant_id)
        now = self.clock()
        comment = PromptComment(
            id=self.store.ids.next("comment"),
            prompt_id=prompt.id,
            tenant_id=tenant_id or prompt.tenant_id,
            parent_id=parent_id,
            body=body,
            created_by=created_by or self.default_actor,
            created_at=now,
            updated_at=now,
            resolved=False,
        )
        self.store.add_comment(comment)
        self._log_activity(
            prompt, comment.tenant_id, comment.created_by, "commented", {"body": body}
        )
        return comment

    def update_comment(
        self,
        comment_id: str,
        tenant_id: str | None = None,
        body: str | None = None,
        resolved: bool | None = None,
    ) -> PromptComment:
        comment = self.store.find_comment(comment_id)
        if comment is None or not _owned_by(comment.tenant_id, tenant_id):
            raise NotFoundError("Comment not found")
        if body is not None:
            comment.body = body
        if resolved is not None:
            comment.resolved = resolved
        comment.updated_at = self.clock()
        return comment

    def delete_comment(self, comment_id: str, tenant_id: str | None = None) -> set[str]:
        """Remove a comment and its direct replies.

        Replies to those replies stay and read back as roots, since their
        parent no longer exists. Unknown ids, and comments owned by another
        tenant, are a no-op.
        """
        comment = self.store.find_comment(comment_id)
        if comment is None or not _owned_by(comment.tenant_id, tenant_id):
            return set()
        doomed = {comment_id} | {
            c.id for c in self.store.comments_of(comment.prompt_id) if c.parent_id == comment_id
        }
        self.store.remove_comments(comment.prompt_id, doomed)
        return doomed

    # --- Shares ---

    def add_share(
        self,
        prompt_id: str,
        tenant_id: str | None,
        target_type: ShareTargetType,
        target_identifier: str,
        role: ShareRole,
        expires_at: datetime | None = None,
        created_by: str | None = None,
    ) -> list[PromptShare]:
        """Append a share and return the prompt's full share list."""
        prompt = self.store.get_prompt(prompt_id, tenant_id)
        share = PromptShare(
            id=self.store.ids.next("share"),
            prompt_id=prompt.id,
            tenant_id=tenant_id or prompt.tenant_id,
            target_type=target_type,
            target_identifier=target_identifier,
            role=role,
            created_by=created_by or self.default_actor,
            created_at=self.clock(),
            expires_at=expires_at,
        )
        shares = self.store.add_share(share)
        self._log_activity(
            prompt,
            share.tenant_id,
            share.created_by,
            "shared",
            {"targetIdentifier": target_identifier, "role": role},
        )
        return shares

    def remove_share(
        self, prompt_id: str, tenant_id: str | None, share_id: str
    ) -> list[PromptShare]:
        """Drop a share by id and return what is left."""
        prompt = self.store.get_prompt(prompt_id, tenant_id)
        before = len(self.store.shares_of(prompt.id))
        shares = self.store.remove_share(prompt.id, share_id)
        if len(shares) < before:
            self._log_activity(
                prompt,
                tenant_id or prompt.tenant_id,
                self.default_actor,
                "share_removed",
                {"shareId": share_id},
            )
        return shares

    # --- Approvals ---

    def request_approval(
        self,
        prompt_id: str,
        tenant_id: str | None,
        approver: str,
        message: str | None = None,
        requested_by: str | None = None,
    ) -> PromptApproval:
        prompt = self.store.get_prompt(prompt_id, tenant_id)
        now = self.clock()
        approval = PromptApproval(
            id=self.store.ids.next("approval"),
            prompt_id=prompt.id,
            tenant_id=tenant_id or prompt.tenant_id,
            requested_by=requested_by or self.default_actor,
            approver=approver,
            status="pending",
            message=message,
            created_at=now,
            updated_at=now,
        )
        self.store.add_approval(approval)
        self._log_activity(
            prompt,
            approval.tenant_id,
            approval.requested_by,
            "approval_requested",
            {"approver": approver},
        )
        return approval

    def update_approval(
        self,
        approval_id: str,
        tenant_id: str | None = None,
        status: ApprovalStatus | None = None,
        message: str | None = None,
    ) -> PromptApproval:
        """Overwrite status and message. Any status may follow any status."""
        approval = self.store.find_approval(approval_id)
        if approval is None or not _owned_by(approval.tenant_id, tenant_id):
            raise NotFoundError("Approval not found")
        if status is not None:
            approval.status = status
        if message is not None:
            approval.message = message
        approval.updated_at = self.clock()

        prompt = self.store.find_prompt(approval.prompt_id)
        if prompt is not None:
            self._log_activity(
                prompt,
                approval.tenant_id,
                approval.approver,
                f"approval_{approval.status}",
                {"approvalId": approval.id},
            )
        return approval

    # --- Notifications ---

    def mark_notification_read(self, notification_id: str) -> NotificationItem:
        """Stamp readAt. A notification that is already read keeps its stamp."""
        item = self.store.find_notification(notification_id)
        if item is None:
            raise NotFoundError("Notification not found")
        if item.read_at is None:
            item.read_at = self.clock()
        return item

    def mark_all_notifications_read(self, tenant_id: str | None = None) -> list[NotificationItem]:
        now = self.clock()
        for item in self.store.notifications:
            if item.read_at is None and (tenant_id is None or item.tenant_id == tenant_id):
                item.read_at = now
        return list(self.store.notifications)

    # --- Internal ---

    def _log_activity(
        self,
        prompt: Prompt,
        tenant_id: str,
        actor: str | None,
        action: str,
        metadata: dict[str, Any] | None = None,
    ) -> PromptActivityEntry:
        entry = PromptActivityEntry(
            id=self.store.ids.next("activity"),
            prompt_id=prompt.id,
            tenant_id=tenant_id,
            actor=actor,
            action=action,
            metadata=metadata,
            created_at=self.clock(),
        )
        return self.store.add_activity(entry)
