import pytest
from skilltree.state import PersistedSkillRecord, ProgressionStore

def test_fresh_store(store):
    assert store.effective_level("root") == 0
    assert store.effectively_unlocked("root")
    assert not store.effectively_unlocked("neutron_basics")
    assert not store.has_session_progress

def test_unknown_ids_read_as_locked(store):
    assert store.effective_level("ghost") == 0
    assert not store.effectively_unlocked("ghost")
    assert not store.is_maxed("ghost")
    assert not store.apply_purchase("ghost")

def test_purchase_goes_to_session_layer(store):
    assert store.apply_purchase("root")

    assert store.persisted_level("root") == 0
    assert store.session_level("root") == 1
    assert store.effective_level("root") == 1
    assert store.has_session_progress

def test_first_level_unlocks_children(store):
    store.apply_purchase("root")

    assert store.effectively_unlocked("neutron_basics")
    assert store.effectively_unlocked("atom_basics")
    assert not store.effectively_unlocked("neutron_count_1")

def test_max_level_bound(store):
    for _ in range(8):
        store.apply_purchase("neutron_count_1")

    assert store.effective_level("neutron_count_1") == 5
    assert store.is_maxed("neutron_count_1")
    assert not store.can_purchase("neutron_count_1")

def test_effective_level_includes_persisted(store):
    store.restore({"neutron_count_1": {"currentLevel": 2, "unlocked": True}})
    store.apply_purchase("neutron_count_1")

    assert store.effective_level("neutron_count_1") == 3

def test_reset_session_idempotent(store):
    store.restore({"neutron_count_1": {"currentLevel": 2, "unlocked": True}})
    store.apply_purchase("root")
    store.apply_purchase("neutron_count_1")

    store.reset_session()
    store.reset_session()

    for skill in store.catalog:
        assert store.effective_level(skill.id) == store.persisted_level(skill.id)
    assert not store.effectively_unlocked("neutron_basics")
    assert store.effectively_unlocked("neutron_count_1")

def test_reset_session_on_empty_overlay(store):
    store.reset_session()

    assert store.effective_level("root") == 0

def test_author_mode(store):
    assert store.set_author_mode(True)
    assert not store.set_author_mode(True)

    assert store.effective_level("root") == 1
    assert store.effectively_unlocked("ultimate_neutron")
    assert store.can_purchase("ultimate_neutron")

    store.apply_purchase("atom_basics")
    assert store.set_author_mode(False)

    assert store.effective_level("root") == 0
    assert store.effective_level("atom_basics") == 0
    assert not store.effectively_unlocked("ultimate_neutron")

def test_author_mode_root_not_doubled(store):
    store.restore({"root": {"currentLevel": 1, "unlocked": True}})
    store.set_author_mode(True)

    assert store.effective_level("root") == 1

def test_persisted_records_are_copies(store):
    records = store.persisted_records()
    records["root"].current_level = 1

    assert store.persisted_level("root") == 0
    assert records["root"].model_dump(by_alias=True) == {"currentLevel": 1, "unlocked": True}

def test_restore_skips_bad_records(store):
    restored = store.restore({
        "root": PersistedSkillRecord(current_level=1, unlocked=True),
        "ghost": {"currentLevel": 1},
        "atom_basics": {"currentLevel": -3},
        "neutron_count_1": {"currentLevel": 99, "unlocked": True},
    })

    assert restored == 2
    assert store.persisted_level("root") == 1
    assert store.persisted_level("atom_basics") == 0
    assert store.persisted_level("neutron_count_1") == 5

def test_reset_progress(store):
    store.restore({"neutron_count_1": {"currentLevel": 2, "unlocked": True}})
    store.apply_purchase("root")

    store.reset_progress()

    assert store.effective_level("neutron_count_1") == 0
    assert not store.effectively_unlocked("neutron_count_1")
    assert store.effectively_unlocked("root")
    assert not store.has_session_progress

def test_total_levels(store):
    store.apply_purchase("neutron_count_1")
    store.apply_purchase("neutron_count_1")
    store.apply_purchase("neutron_count_2")

    assert store.total_levels(["neutron_count_1", "neutron_count_2", "neutron_count_3"]) == 3
