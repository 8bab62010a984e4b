"""Tests for the mutation pipeline."""

import pytest

from prompt_mock.core.errors import ConflictError, NotFoundError, ValidationError


class TestCreatePrompt:
    def test_new_prompt_starts_at_version_one(self, empty_backend):
        prompt = empty_backend.mutations.create_prompt("t1", title="A", body="b")
        assert prompt.version == 1
        history = empty_backend.store.versions_of(prompt.id)
        assert [v.version for v in history] == [1]
        assert history[0].title == "A"

    def test_new_prompt_is_listed_first(self, backend):
        prompt = backend.mutations.create_prompt("tenant_acme", title="Fresh", body="b")
        assert backend.store.tenant_prompts("tenant_acme")[0].id == prompt.id

    def test_ids_do_not_collide_with_seed(self, backend):
        prompt = backend.mutations.create_prompt("tenant_acme", title="A", body="b")
        assert backend.store.find_prompt(prompt.id) is prompt
        assert prompt.id == "prompt_1"

    def test_unknown_tenant_opens_partition(self, backend):
        backend.mutations.create_prompt("t9", title="A", body="b")
        assert len(backend.store.tenant_prompts("t9")) == 1

    def test_missing_tenant(self, backend):
        with pytest.raises(ValidationError, match="Missing tenantId"):
            backend.mutations.create_prompt(None, title="A", body="b")


class TestUpdatePrompt:
    def test_each_update_adds_one_version(self, empty_backend):
        mutations = empty_backend.mutations
        prompt = mutations.create_prompt("t1", title="A", body="b")
        mutations.update_prompt(prompt.id, "t1", title="B")
        mutations.update_prompt(prompt.id, "t1", body="c")
        history = empty_backend.store.versions_of(prompt.id)
        assert prompt.version == 3
        assert [v.version for v in history] == [3, 2, 1]
        assert history[0].title == "B"
        assert history[0].body == "c"

    def test_none_fields_are_ignored(self, backend):
        prompt = backend.mutations.update_prompt(
            "prompt_acme_1", "tenant_acme", title=None, tags=["x"]
        )
        assert prompt.title == "Acme Prompt 1"
        assert prompt.tags == ["x"]

    def test_update_bumps_updated_at(self, backend):
        before = backend.store.find_prompt("prompt_acme_2").updated_at
        prompt = backend.mutations.update_prompt("prompt_acme_2", "tenant_acme", archived=True)
        assert prompt.updated_at > before

    def test_update_logs_activity(self, backend):
        backend.mutations.update_prompt("prompt_acme_1", "tenant_acme", title="New")
        entry = backend.store.activity_of("prompt_acme_1")[0]
        assert entry.action == "updated"
        assert entry.metadata == {"version": 4, "fields": ["title"]}

    def test_wrong_tenant(self, backend):
        with pytest.raises(NotFoundError):
            backend.mutations.update_prompt("prompt_acme_1", "tenant_globex", title="X")
        assert backend.store.find_prompt("prompt_acme_1").version == 3

    def test_missing_tenant(self, backend):
        with pytest.raises(ValidationError):
            backend.mutations.update_prompt("prompt_acme_1", None, title="X")


class TestDeletePrompt:
    def test_cascade_leaves_no_references(self, backend):
        assert backend.mutations.delete_prompt("prompt_acme_1", "tenant_acme")
        refs = backend.store.references("prompt_acme_1")
        assert refs == {key: 0 for key in refs}

    def test_delete_is_idempotent(self, backend):
        backend.mutations.delete_prompt("prompt_acme_1", "tenant_acme")
        assert not backend.mutations.delete_prompt("prompt_acme_1", "tenant_acme")
        assert not backend.mutations.delete_prompt("never_existed", "tenant_acme")


class TestUsage:
    def test_actor_reflects_credentials(self, backend):
        anonymous = backend.mutations.record_usage("prompt_acme_2", "tenant_acme")
        signed = backend.mutations.record_usage("prompt_acme_2", "tenant_acme", authorized=True)
        assert anonymous.actor == "system"
        assert signed.actor == "authenticated"
        feed = backend.store.activity_of("prompt_acme_2")
        assert [e.id for e in feed] == [signed.id, anonymous.id]

    def test_usage_does_not_touch_prompt(self, backend):
        prompt = backend.store.find_prompt("prompt_acme_2")
        version, updated_at = prompt.version, prompt.updated_at
        backend.mutations.record_usage("prompt_acme_2", "tenant_acme")
        assert prompt.version == version
        assert prompt.updated_at == updated_at


class TestComments:
    def test_add_inherits_prompt_tenant(self, backend):
        comment = backend.mutations.add_comment("prompt_acme_1", None, body="hi")
        assert comment.tenant_id == "tenant_acme"
        assert comment.created_by == "e2e-user"
        assert comment.id == "comment_3"
        assert backend.store.activity_of("prompt_acme_1")[0].action == "commented"

    def test_update(self, backend):
        comment = backend.mutations.update_comment("comment_1", resolved=True)
        assert comment.resolved
        assert comment.body == "This prompt looks great!"

    def test_update_unknown(self, backend):
        with pytest.raises(NotFoundError, match="Comment not found"):
            backend.mutations.update_comment("comment_99", body="x")

    def test_delete_removes_direct_replies_only(self, backend):
        mutations = backend.mutations
        grandchild = mutations.add_comment(
            "prompt_acme_1", "tenant_acme", body="deep", parent_id="comment_2"
        )
        removed = mutations.delete_comment("comment_1")
        assert removed == {"comment_1", "comment_2"}
        remaining = backend.store.comments_of("prompt_acme_1")
        assert [c.id for c in remaining] == [grandchild.id]
        assert remaining[0].parent_id == "comment_2"

    def test_delete_unknown_is_noop(self, backend):
        assert backend.mutations.delete_comment("comment_99") == set()
        assert len(backend.store.comments_of("prompt_acme_1")) == 2

    def test_other_tenant_cannot_update(self, backend):
        with pytest.raises(NotFoundError, match="Comment not found"):
            backend.mutations.update_comment("comment_1", "tenant_globex", body="x")
        assert backend.store.find_comment("comment_1").body == "This prompt looks great!"

    def test_other_tenant_delete_is_noop(self, backend):
        assert backend.mutations.delete_comment("comment_1", "tenant_globex") == set()
        assert len(backend.store.comments_of("prompt_acme_1")) == 2

    def test_owner_can_update(self, backend):
        comment = backend.mutations.update_comment("comment_1", "tenant_acme", body="edited")
        assert comment.body == "edited"


class TestShares:
    def test_add_returns_full_list(self, backend):
        shares = backend.mutations.add_share(
            "prompt_acme_1",
            "tenant_acme",
            target_type="email",
            target_identifier="pat@example.com",
            role="viewer",
        )
        assert [s.id for s in shares] == ["share_1", "share_2"]

    def test_remove_returns_remaining(self, backend):
        shares = backend.mutations.remove_share("prompt_acme_1", "tenant_acme", "share_1")
        assert shares == []
        assert backend.store.activity_of("prompt_acme_1")[0].action == "share_removed"

    def test_remove_unknown_share(self, backend):
        shares = backend.mutations.remove_share("prompt_acme_1", "tenant_acme", "share_99")
        assert [s.id for s in shares] == ["share_1"]
        assert backend.store.activity_of("prompt_acme_1")[0].id == "activity_1"


class TestApprovals:
    def test_request(self, backend):
        approval = backend.mutations.request_approval("prompt_acme_2", None, approver="sam")
        assert approval.status == "pending"
        assert approval.requested_by == "e2e-user"
        assert approval.tenant_id == "tenant_acme"

    def test_any_transition_allowed(self, backend):
        mutations = backend.mutations
        assert mutations.update_approval("approval_1", status="approved").status == "approved"
        assert mutations.update_approval("approval_1", status="pending").status == "pending"
        assert backend.store.activity_of("prompt_acme_1")[0].action == "approval_pending"

    def test_message_only(self, backend):
        approval = backend.mutations.update_approval("approval_1", message="ping")
        assert approval.status == "pending"
        assert approval.message == "ping"

    def test_unknown(self, backend):
        with pytest.raises(NotFoundError):
            backend.mutations.update_approval("approval_99", status="approved")

    def test_other_tenant(self, backend):
        with pytest.raises(NotFoundError, match="Approval not found"):
            backend.mutations.update_approval("approval_1", "tenant_globex", status="approved")
        assert backend.store.find_approval("approval_1").status == "pending"


class TestNotifications:
    def test_mark_read_once(self, backend):
        first = backend.mutations.mark_notification_read("notification_1").read_at
        second = backend.mutations.mark_notification_read("notification_1").read_at
        assert first is not None
        assert first == second

    def test_already_read_keeps_stamp(self, backend):
        before = backend.store.find_notification("notification_2").read_at
        assert backend.mutations.mark_notification_read("notification_2").read_at == before

    def test_mark_all(self, backend):
        items = backend.mutations.mark_all_notifications_read()
        assert all(item.read_at is not None for item in items)

    def test_mark_all_other_tenant(self, backend):
        backend.mutations.mark_all_notifications_read("tenant_globex")
        assert backend.store.find_notification("notification_1").read_at is None

    def test_unknown(self, backend):
        with pytest.raises(NotFoundError):
            backend.mutations.mark_notification_read("notification_99")


class TestTenants:
    def test_create(self, backend):
        tenant = backend.mutations.create_tenant(name="Initech", slug="initech")
        assert tenant.id == "tenant_1"
        assert backend.store.tenant_prompts(tenant.id) == []
        assert backend.overview(tenant.id).stats.total_prompts.value == 0

    def test_duplicate_slug(self, backend):
        with pytest.raises(ConflictError):
            backend.mutations.create_tenant(name="Acme Again", slug="acme")
