"""
Demonstration of two clients sharing a list.

Run it to watch Alice's changes show up in Bob's view without Bob ever
re-fetching from the store.
"""

import logging

from realtime.list_client import ListClient
from realtime.registry import MembershipRegistry
from realtime.relay import EventRelay
from shared import config
from shared.data_store import DataStore
from shared.session import SessionStore

logging.basicConfig(
    level=config.LOG_LEVEL,
    format=config.LOG_FORMAT,
    datefmt="%H:%M:%S",
)


def _print_view(label: str, client: ListClient) -> None:
    print(f"\n{label}'s view of {client.list_id}:")
    for product in client.view.display_products():
        mark = "x" if product.checked else " "
        print(f"  [{mark}] {product.name} (x{product.quantity})")
    names = ", ".join(m.name or m.email or m.user_id for m in client.view.members.values())
    print(f"  members: {names}")


def run_two_clients_demo():
    """
    Alice and Bob open the same list; Alice edits it.

    This shows:
    1. Both clients join the room for list-001
    2. Alice's mutations go to the store, then to her own view, then to the relay
    3. Bob's reconciler applies each relayed event
    """
    print("\n" + "=" * 70)
    print("REALTIME DEMO: Two clients on one list")
    print("=" * 70)

    store = DataStore()
    sessions = SessionStore()
    registry = MembershipRegistry()
    relay = EventRelay(registry)

    alice = ListClient("list-001", store, sessions, sessions.issue("user-001"), registry, relay)
    bob = ListClient("list-001", store, sessions, sessions.issue("user-002"), registry, relay)
    alice.open()
    bob.open()

    print("\n" + "-" * 70)
    print("ACTION: Alice adds Butter, checks Milk, deletes Eggs, invites Carol")
    print("-" * 70)

    alice.add_product("Butter")
    alice.toggle_checked("prod-001")
    alice.delete_product("prod-003")
    alice.add_member("carol@example.com")

    _print_view("Alice", alice)
    _print_view("Bob", bob)

    alice.close()
    bob.close()
    return alice.view, bob.view


if __name__ == "__main__":
    run_two_clients_demo()
