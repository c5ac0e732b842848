"""
docauthz Demo Application

This demo shows how access decisions are reached for a handful of documents:
- Group and user allow-lists
- Read implies discover
- Missing documents
- One resolver lookup per document per context
- A custom rule layered on the default chain
"""

import asyncio
import logging
import sys

from docauthz import Ability, Action, MemoryPermissionsResolver, RuleChain, SolrDocument, User
from docauthz.authz import MemoryTracer


DOCUMENTS = {
    "doc1": {"read_access_group_ssim": ["staff"]},
    "doc2": {"read_access_group_ssim": [], "discover_access_group_ssim": ["public"]},
    "doc3": {"read_access_person_ssim": ["alice"]},
    "doc4": {"edit_access_person_ssim": ["bob"], "read_access_person_ssim": ["bob"]},
}


def edit_permissions(ability):
    """Example third permission tier, stored in an extra document field."""
    async def can_edit(document):
        fields = await ability.cache.fields_for(document.id)
        return bool(fields) and ability.user_key in fields.get("edit_access_person_ssim", [])

    ability.grant("edit", SolrDocument.resource_type, can_edit)


async def run_demo() -> int:
    """Run the demo"""
    print("docauthz Demo Application")
    print("=" * 50)
    print()

    resolver = MemoryPermissionsResolver(DOCUMENTS)
    subjects = [
        ("guest", None),
        ("alice", User("alice")),
        ("carol (staff)", User("carol", groups=["staff"])),
    ]

    print("Step 1: Read and discover decisions")
    print("-" * 40)

    for label, user in subjects:
        ability = Ability(user, resolver)
        print(f"{label}: groups {sorted(ability.user_groups())}")
        for doc_id in ["doc1", "doc2", "doc3", "missing"]:
            document = SolrDocument(id=doc_id)
            can_read = await ability.can(Action.READ, document)
            can_discover = await ability.can(Action.DISCOVER, document)
            print(f"  - {doc_id}: read={can_read} discover={can_discover}")
        print(f"  - cache: {ability.cache.stats()}")
        print()

    print("Step 2: Tracing a decision")
    print("-" * 40)

    tracer = MemoryTracer()
    ability = Ability(User("alice"), resolver, tracer=tracer)
    await ability.can(Action.DISCOVER, "doc3")
    for event in tracer.get_events():
        print(f"  - {event.event}: {event.details}")
    print()

    print("Step 3: Custom rule")
    print("-" * 40)

    rules = RuleChain.default().append(edit_permissions)
    for user in [User("bob"), User("alice")]:
        ability = Ability(user, resolver, rules=rules)
        allowed = await ability.can("edit", SolrDocument(id="doc4"))
        print(f"  - {user.user_key} may edit doc4: {allowed}")
    print()

    print(f"Resolver lookups: {dict(resolver.calls)}")
    print("Demo completed successfully!")
    return 0


def main() -> int:
    logging.basicConfig(level=logging.WARNING)
    try:
        return asyncio.run(run_demo())
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
