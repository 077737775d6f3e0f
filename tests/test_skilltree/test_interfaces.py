import pytest
from engine.core.events import CueKind
from skilltree.interfaces import DEFAULT_STATS, EventBusCueEmitter, UpgradeState, Wallet

def test_wallet_deduct():
    wallet = Wallet(100)

    assert wallet.deduct(40)
    assert wallet.balance() == 60
    assert not wallet.deduct(61)
    assert not wallet.deduct(-5)
    assert wallet.balance() == 60

def test_wallet_add():
    wallet = Wallet()
    wallet.add(25)
    wallet.add(-10)

    assert wallet.balance() == 25

def test_upgrade_state(upgrades):
    assert upgrades.get_stat("maxTime") == DEFAULT_STATS["maxTime"]

    upgrades.set_stat("maxTime", 14)
    upgrades.set_stat("critChance", 6)
    assert upgrades.as_dict()["maxTime"] == 14
    assert upgrades.get_stat("unknown", 3) == 3

    upgrades.reset()
    assert upgrades.as_dict() == DEFAULT_STATS

def test_cue_emitter(event_bus):
    received = []
    def handler(event):
        received.append(event.type)
    event_bus.subscribe(CueKind.PURCHASE_SUCCEEDED, handler)

    EventBusCueEmitter(event_bus).emit(CueKind.PURCHASE_SUCCEEDED)

    assert received == [CueKind.PURCHASE_SUCCEEDED]
