"""
Tests for the client reconciler and display ordering.
"""

from datetime import datetime, timedelta, timezone

import pytest
from realtime.events import (
    EVENT_CLASSES,
    MemberAdded,
    MemberRemoved,
    ProductAdded,
    ProductDeleted,
    ProductEdited,
)
from realtime.reconciler import ClientListView, Reconciler, display_order
from shared.data_store import DataStore
from shared.errors import NotFound
from shared.models import Member, Product

T1 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(minutes=5)


@pytest.fixture
def view() -> ClientListView:
    return ClientListView(
        list_id="list-7",
        products=[Product(id="p0", list_id="list-7", name="Bread", created_at=T1)],
        members={"u1": Member(list_id="list-7", user_id="u1", name="Alice")},
    )


@pytest.fixture
def reconciler(view: ClientListView) -> Reconciler:
    return Reconciler(view)


@pytest.fixture
def milk() -> Product:
    return Product(id="p1", list_id="list-7", name="Milk", quantity=1, checked=False)


class TestProductEvents:

    def test_product_added_appends(self, reconciler: Reconciler, milk: Product):
        assert reconciler.apply(ProductAdded(list_id="list-7", product=milk)) is True

        assert [p.id for p in reconciler.view.products] == ["p0", "p1"]

    def test_duplicate_add_yields_duplicate(self, reconciler: Reconciler, milk: Product):
        event = ProductAdded(list_id="list-7", product=milk)
        reconciler.apply(event)
        reconciler.apply(event)

        assert [p.id for p in reconciler.view.products] == ["p0", "p1", "p1"]

    def test_add_then_delete_restores_view(self, reconciler: Reconciler, milk: Product):
        before = list(reconciler.view.products)

        reconciler.apply(ProductAdded(list_id="list-7", product=milk))
        reconciler.apply(ProductDeleted(list_id="list-7", product_id="p1"))

        assert reconciler.view.products == before

    def test_product_edited_replaces(self, reconciler: Reconciler):
        edited = Product(id="p0", list_id="list-7", name="Rye bread", checked=True, created_at=T1)

        reconciler.apply(ProductEdited(list_id="list-7", product=edited))

        assert reconciler.view.products == [edited]

    def test_edit_unknown_product_is_noop(self, reconciler: Reconciler, milk: Product):
        before = list(reconciler.view.products)

        reconciler.apply(ProductEdited(list_id="list-7", product=milk))

        assert reconciler.view.products == before

    def test_delete_unknown_product_is_noop(self, reconciler: Reconciler):
        before = list(reconciler.view.products)

        reconciler.apply(ProductDeleted(list_id="list-7", product_id="missing"))

        assert reconciler.view.products == before


class TestMemberEvents:

    def test_member_added(self, reconciler: Reconciler):
        reconciler.apply(MemberAdded(list_id="list-7", member=Member(list_id="list-7", user_id="u9")))

        assert set(reconciler.view.members) == {"u1", "u9"}

    def test_member_added_twice_keeps_one(self, reconciler: Reconciler):
        event = MemberAdded(list_id="list-7", member=Member(list_id="list-7", user_id="u9"))
        reconciler.apply(event)
        reconciler.apply(event)

        assert len(reconciler.view.members) == 2

    def test_member_removed(self, reconciler: Reconciler):
        reconciler.apply(MemberRemoved(list_id="list-7", user_id="u1"))

        assert reconciler.view.members == {}

    def test_remove_unknown_member_is_noop(self, reconciler: Reconciler):
        reconciler.apply(MemberRemoved(list_id="list-7", user_id="u9"))

        assert set(reconciler.view.members) == {"u1"}


class TestFiltering:

    def test_event_for_other_list_is_ignored(self, reconciler: Reconciler):
        assert reconciler.apply(ProductDeleted(list_id="list-8", product_id="p0")) is False
        assert len(reconciler.view.products) == 1

    def test_apply_wire(self, reconciler: Reconciler):
        applied = reconciler.apply_wire({
            "type": "product-added",
            "list_id": "list-7",
            "product": {"id": "p1", "list_id": "list-7", "name": "Milk"},
        })

        assert applied is True
        assert reconciler.view.find_product("p1").name == "Milk"

    def test_apply_wire_ignores_unknown_kind(self, reconciler: Reconciler):
        assert reconciler.apply_wire({"type": "connected", "connection_id": "x"}) is False
        assert len(reconciler.view.products) == 1

    def test_every_event_kind_has_a_handler(self, reconciler: Reconciler):
        for cls in EVENT_CLASSES:
            assert cls in reconciler._handlers


class TestDisplayOrder:

    def test_unchecked_first_then_oldest(self):
        products = [
            Product(id="a", list_id="l", name="A", checked=True, created_at=T1),
            Product(id="b", list_id="l", name="B", checked=False, created_at=T2),
            Product(id="c", list_id="l", name="C", checked=False, created_at=T1),
        ]

        ordered = display_order(products)

        assert [p.id for p in ordered] == ["c", "b", "a"]

    def test_missing_timestamp_keeps_group(self):
        products = [
            Product(id="a", list_id="l", name="A", checked=True),
            Product(id="b", list_id="l", name="B", checked=False),
        ]

        assert [p.id for p in display_order(products)] == ["b", "a"]

    def test_display_does_not_reorder_storage(self, view: ClientListView, reconciler: Reconciler):
        checked = Product(id="p9", list_id="list-7", name="Jam", checked=True, created_at=T1)
        reconciler.apply(ProductAdded(list_id="list-7", product=checked))
        reconciler.apply(ProductEdited(
            list_id="list-7",
            product=Product(id="p0", list_id="list-7", name="Bread", checked=True, created_at=T2),
        ))

        assert [p.id for p in view.products] == ["p0", "p9"]
        assert [p.id for p in view.display_products()] == ["p9", "p0"]


class TestInitialFetch:

    def test_from_store(self, data_store: DataStore, groceries_list_id: str):
        view = ClientListView.from_store(data_store, groceries_list_id)

        assert [p.name for p in view.products] == ["Milk", "Bread", "Eggs"]
        assert set(view.members) == {"user-001", "user-002"}
        assert [p.name for p in view.display_products()] == ["Milk", "Eggs", "Bread"]

    def test_from_store_unknown_list(self, data_store: DataStore):
        with pytest.raises(NotFound):
            ClientListView.from_store(data_store, "nonexistent")

    def test_naive_wire_timestamp_sorts_with_stored_ones(self, data_store: DataStore, groceries_list_id: str):
        view = ClientListView.from_store(data_store, groceries_list_id)
        reconciler = Reconciler(view)

        reconciler.apply_wire({
            "type": "product-added",
            "list_id": groceries_list_id,
            "product": {
                "id": "p-naive",
                "list_id": groceries_list_id,
                "name": "Butter",
                "created_at": "2024-05-01T09:02:00",
            },
        })

        assert [p.name for p in view.display_products()] == ["Milk", "Butter", "Eggs", "Bread"]
        assert view.find_product("p-naive").created_at.tzinfo is not None


class TestHandlerCoverage:

    def test_unhandled_event_class_is_rejected(self, monkeypatch, view: ClientListView):
        class ListRenamed:
            pass

        monkeypatch.setattr("realtime.reconciler.EVENT_CLASSES", (*EVENT_CLASSES, ListRenamed))

        with pytest.raises(TypeError, match="ListRenamed"):
            Reconciler(view)
