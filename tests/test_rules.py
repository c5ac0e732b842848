"""
Tests for the grant rule chain.
"""

from dataclasses import dataclass

import pytest

from docauthz import Ability, Action, MemoryPermissionsResolver, RuleChain, SolrDocument, User
from docauthz.authz import GrantSet, discover_permissions, read_permissions


DOCUMENTS = {
    "doc1": {"read_access_group_ssim": ["staff"], "edit_access_person_ssim": ["carol"]},
    "doc2": {"discover_access_group_ssim": ["public"]},
    "doc3": {"read_access_person_ssim": ["alice"]},
}


@dataclass
class Collection:
    """A resource type the default rules know nothing about"""
    resource_type = "collection"

    id: str
    owner: str


def edit_permissions(ability):
    """Third permission tier stored in an extra document field"""
    async def can_edit(document):
        fields = await ability.cache.fields_for(document.id)
        return bool(fields) and ability.user_key in fields.get("edit_access_person_ssim", [])

    ability.grant("edit", "document", can_edit)


def collection_permissions(ability):
    """Owners may read their collections"""
    ability.grant(Action.READ, "collection", lambda collection: collection.owner == ability.user_key)


def admin_permissions(ability):
    """Admins may read every document"""
    ability.grant(Action.READ, "document", lambda document: ability.user_key == "admin")


@pytest.fixture
def resolver():
    """Create a resolver holding the test documents"""
    return MemoryPermissionsResolver(DOCUMENTS)


class TestRuleChain:
    """Building rule chains"""

    def test_default_chain(self):
        """The default chain grants discover then read"""
        assert list(RuleChain.default()) == [discover_permissions, read_permissions]

    def test_append_and_prepend_return_new_chains(self):
        """Chains are immutable"""
        default = RuleChain.default()
        extended = default.append(edit_permissions).prepend(admin_permissions)

        assert len(default) == 2
        assert list(extended) == [
            admin_permissions, discover_permissions, read_permissions, edit_permissions
        ]

    def test_rules_must_be_callable(self):
        """Non-callable rules are rejected"""
        with pytest.raises(TypeError):
            RuleChain(["discover_permissions"])

    def test_rules_run_in_order(self, resolver):
        """Rules run once, in chain order, at construction"""
        seen = []
        chain = RuleChain([lambda a: seen.append("first"), lambda a: seen.append("second")])

        Ability(User("alice"), resolver, rules=chain)

        assert seen == ["first", "second"]

    def test_rules_as_list(self, resolver):
        """A plain list of rules is accepted"""
        ability = Ability(User("alice"), resolver, rules=[read_permissions])

        assert ("read", "document") in ability.grants
        assert ("discover", "document") not in ability.grants


class TestCustomRules:
    """Layering custom rules on the defaults"""

    @pytest.mark.asyncio
    async def test_custom_action(self, resolver):
        """A custom rule adds a new action"""
        rules = RuleChain.default().append(edit_permissions)

        assert await Ability(User("carol"), resolver, rules=rules).can("edit", SolrDocument(id="doc1"))
        assert not await Ability(User("alice"), resolver, rules=rules).can("edit", SolrDocument(id="doc1"))
        assert not await Ability(User("carol"), resolver).can("edit", SolrDocument(id="doc1"))

    @pytest.mark.asyncio
    async def test_custom_resource_type(self, resolver):
        """A custom rule can cover a new resource type"""
        rules = RuleChain.default().append(collection_permissions)
        ability = Ability(User("alice"), resolver, rules=rules)

        assert await ability.can(Action.READ, Collection(id="c1", owner="alice"))
        assert not await ability.can(Action.READ, Collection(id="c2", owner="bob"))
        assert not await ability.can(Action.DISCOVER, Collection(id="c1", owner="alice"))

    @pytest.mark.asyncio
    async def test_grants_are_or_combined(self, resolver):
        """An extra read rule adds access without removing any"""
        rules = RuleChain.default().append(admin_permissions)

        admin = Ability(User("admin"), resolver, rules=rules)
        assert await admin.can(Action.READ, SolrDocument(id="doc3"))

        alice = Ability(User("alice"), resolver, rules=rules)
        assert await alice.can(Action.READ, SolrDocument(id="doc3"))
        assert not await alice.can(Action.READ, SolrDocument(id="doc1"))

    @pytest.mark.asyncio
    async def test_extension_leaves_defaults_unchanged(self, resolver):
        """Unrelated rules do not change default outcomes"""
        subjects = [None, User("alice"), User("carol", groups=["staff"])]
        extended = RuleChain.default().append(edit_permissions, collection_permissions)

        for subject in subjects:
            plain = Ability(subject, resolver)
            layered = Ability(subject, resolver, rules=extended)
            for action in [Action.READ, Action.DISCOVER]:
                for doc_id in list(DOCUMENTS) + ["missing"]:
                    document = SolrDocument(id=doc_id)
                    assert await plain.can(action, document) == await layered.can(action, document)

    @pytest.mark.asyncio
    async def test_custom_rules_share_the_cache(self, resolver):
        """Custom rules reuse the context's document cache"""
        rules = RuleChain.default().append(edit_permissions)
        ability = Ability(User("carol", groups=["staff"]), resolver, rules=rules)

        await ability.can(Action.READ, SolrDocument(id="doc1"))
        await ability.can("edit", SolrDocument(id="doc1"))

        assert resolver.calls["doc1"] == 1


class TestGrantSet:
    """The grant registry"""

    def test_grants_frozen_after_construction(self, resolver):
        """No grants can be added once the chain has run"""
        ability = Ability(User("alice"), resolver)

        assert ability.grants.frozen
        with pytest.raises(RuntimeError):
            ability.grant(Action.READ, "document", lambda document: True)

    def test_invalid_grants(self):
        """Invalid actions, types and predicates are rejected"""
        grants = GrantSet()

        with pytest.raises(ValueError):
            grants.add("", "document", lambda r: True)
        with pytest.raises(ValueError):
            grants.add(Action.READ, "", lambda r: True)
        with pytest.raises(TypeError):
            grants.add(Action.READ, "document", True)

    @pytest.mark.asyncio
    async def test_allows_sync_and_async_predicates(self):
        """Predicates may be plain functions or coroutines"""
        async def deny(resource):
            return False

        grants = GrantSet()
        grants.add(Action.READ, "document", deny)
        grants.add(Action.READ, "document", lambda resource: resource.id == "doc1")

        assert len(grants) == 2
        assert await grants.allows("read", "document", SolrDocument(id="doc1"))
        assert not await grants.allows("read", "document", SolrDocument(id="doc2"))
        assert not await grants.allows("discover", "document", SolrDocument(id="doc1"))
