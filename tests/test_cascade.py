# sales_orders/tests/test_cascade.py

import pytest

from sales_orders.constants import OP_CUSTOMERS, OP_SO_TYPES
from sales_orders.modules.common.cascade import CascadeChain, CascadeLink
from sales_orders.modules.common.option_cache import ReferenceFetcher


def _header_chain(reference, runner, notes, changes=None):
    return CascadeChain(
        [
            CascadeLink("division", ReferenceFetcher("divisions", reference.list_divisions, runner, notes)),
            CascadeLink("so_type", ReferenceFetcher("SO types", reference.list_so_types, runner, notes),
                        parents=("division",)),
            CascadeLink("customer", ReferenceFetcher("customers", reference.list_customers, runner, notes),
                        parents=("division",)),
        ],
        on_change=(changes.append if changes is not None else None),
    )


def _item_chain(reference, runner):
    return CascadeChain([
        CascadeLink("main_group", ReferenceFetcher("main groups", reference.list_main_groups, runner)),
        CascadeLink("sub_main_group", ReferenceFetcher("sub main groups", reference.list_sub_main_groups, runner),
                    parents=("main_group",)),
        CascadeLink("item", ReferenceFetcher("items", reference.list_items, runner),
                    parents=("main_group", "sub_main_group")),
        CascadeLink("unit", ReferenceFetcher("units", reference.list_units, runner), parents=("item",)),
    ])


def test_unknown_parent_is_rejected(reference, runner):
    f = ReferenceFetcher("x", reference.list_divisions, runner)
    with pytest.raises(ValueError):
        CascadeChain([CascadeLink("child", f, parents=("missing",))])


def test_roots_load_and_children_wait_for_parents(reference, runner, notes):
    chain = _header_chain(reference, runner, notes)
    chain.load_roots()
    assert [o.label for o in chain["division"].options] == ["North", "South"]
    assert chain.is_enabled("division")
    assert not chain.is_enabled("so_type")
    assert chain["so_type"].options == []


def test_selecting_parent_loads_siblings(reference, fake_api, runner, notes):
    chain = _header_chain(reference, runner, notes)
    chain.load_roots()
    chain.select("division", 1)

    assert [o.so_type_id for o in chain["so_type"].options] == [10, 11]
    assert [o.customer_id for o in chain["customer"].options] == [100]
    assert chain.is_enabled("so_type") and chain.is_enabled("customer")


def test_changing_parent_clears_descendants_before_refetch(reference, fake_api, deferred, notes):
    chain = _header_chain(reference, deferred, notes)
    chain.load_roots()
    deferred.run_all()
    chain.select("division", 1)
    deferred.run_all()
    chain.select("so_type", 10)
    chain.select("customer", 100)

    chain.select("division", 2)
    # cleared synchronously, new lists still in flight
    assert chain["so_type"].value is None
    assert chain["customer"].value is None
    assert chain["so_type"].options == []
    assert chain["so_type"].loading
    assert not chain.is_enabled("so_type")

    deferred.run_all()
    assert [o.so_type_id for o in chain["so_type"].options] == [20]
    assert [o.customer_id for o in chain["customer"].options] == [200]


def test_stale_response_is_dropped(reference, fake_api, deferred, notes):
    chain = _header_chain(reference, deferred, notes)
    chain.load_roots()
    deferred.run_all()

    chain.select("division", 1)      # jobs: so_type(1), customer(1)
    chain.select("division", 2)      # jobs: so_type(2), customer(2)
    # the newer responses arrive first, then the old ones
    deferred.run(2)
    deferred.run(2)
    deferred.run_all()

    assert [o.so_type_id for o in chain["so_type"].options] == [20]
    assert [o.customer_id for o in chain["customer"].options] == [200]
    assert not chain["so_type"].loading


def test_clearing_parent_clears_children_without_request(reference, fake_api, runner, notes):
    chain = _header_chain(reference, runner, notes)
    chain.load_roots()
    chain.select("division", 1)
    calls = len(fake_api.ops(OP_SO_TYPES))

    chain.select("division", None)
    assert chain["so_type"].options == [] and chain["customer"].options == []
    assert len(fake_api.ops(OP_SO_TYPES)) == calls
    assert len(fake_api.ops(OP_CUSTOMERS)) == 1


def test_item_needs_both_groups_and_unit_follows_item(reference, runner):
    chain = _item_chain(reference, runner)
    chain.load_roots()
    chain.select("main_group", 1)
    assert not chain.is_enabled("item")

    chain.select("sub_main_group", 11)
    assert [o.item_id for o in chain["item"].options] == [111, 112]

    chain.select("item", 112)
    assert [o.unit for o in chain["unit"].options] == ["MTR", "YRD"]

    chain.select("main_group", 2)
    assert chain.values() == {"main_group": 2, "sub_main_group": None, "item": None, "unit": None}
    assert chain["item"].options == [] and chain["unit"].options == []


def test_restore_applies_values_and_loads_every_level(reference, runner):
    chain = _item_chain(reference, runner)
    chain.restore({"main_group": 1, "sub_main_group": 11, "item": 111, "unit": 5})

    assert chain.values() == {"main_group": 1, "sub_main_group": 11, "item": 111, "unit": 5}
    assert chain["unit"].option_for().label == "MTR"
    assert chain["item"].option_for(112).item_name == "Denim"


def test_reset_keeps_root_options(reference, fake_api, runner, notes):
    changes = []
    chain = _header_chain(reference, runner, notes, changes)
    chain.load_roots()
    chain.select("division", 1)
    chain.reset()
    assert chain.values() == {"division": None, "so_type": None, "customer": None}
    assert len(chain["division"].options) == 2
    assert changes[-1] is None
