import pytest
from engine.core.events import ProgressionEvent
from engine.graphics.viewport import ViewportState
from skilltree.controller import SkillTreeController
from skilltree.interfaces import Wallet, UpgradeState
from skilltree.purchase import PurchaseStatus
from skilltree.save.manager import SaveManager
from skilltree.state import PersistedSkillRecord

class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def controller(catalog, layout, wallet, upgrades, durable_store, event_bus, clock):
    controller = SkillTreeController(
        catalog, layout, wallet, upgrades,
        durable_store=durable_store, event_bus=event_bus, clock=clock,
    )
    controller.center_view()
    durable_store.reset_mock()
    return controller

# Root sits at world (1400, 1400); centred at scale 0.5 on a 1200x640 canvas
ROOT_SCREEN = (600, 320)

def test_initial_view_centres_root(catalog, layout, wallet, upgrades, durable_store):
    controller = SkillTreeController(catalog, layout, wallet, upgrades, durable_store=durable_store)
    controller.center_view()

    assert controller.viewport.scale == 0.5
    assert controller.world_to_screen(1400, 1400) == pytest.approx(ROOT_SCREEN)
    durable_store.write_viewport.assert_called_once()

def test_saved_view_restored(controller, durable_store):
    controller.center_view(ViewportState(offset_x=12, offset_y=34, scale=2))

    assert (controller.viewport.offset_x, controller.viewport.offset_y) == (12, 34)
    assert controller.viewport.scale == 2
    durable_store.write_viewport.assert_not_called()

def test_click_purchases_node(controller, durable_store):
    controller.pointer_down(*ROOT_SCREEN)
    result = controller.pointer_up(ROOT_SCREEN[0] + 2, ROOT_SCREEN[1] + 1)

    assert result.success
    assert controller.effective_level("root") == 1
    durable_store.write_viewport.assert_called()
    durable_store.write_progression.assert_called_once()

def test_drag_pans_without_purchase(controller, durable_store):
    controller.pointer_down(*ROOT_SCREEN)
    controller.pointer_move(650, 320)
    assert controller.scheduler.pending

    result = controller.pointer_up(650, 320)

    assert result is None
    assert controller.effective_level("root") == 0
    assert controller.viewport.offset_x == pytest.approx(-50)
    assert not controller.scheduler.pending
    durable_store.write_viewport.assert_called_once()

def test_click_on_empty_space(controller):
    controller.pointer_down(10, 10)

    assert controller.pointer_up(10, 10) is None

def test_pointer_up_without_down(controller):
    assert controller.pointer_up(*ROOT_SCREEN) is None

def test_hit_test_only_visible_nodes(controller):
    # neutron_basics is one grid cell above the root
    above = (600, 320 - 150 * 0.5)
    assert controller.hit_test(*above) is None

    controller.purchase("root")

    assert controller.hit_test(*above) == "neutron_basics"
    assert controller.hit_test(*ROOT_SCREEN) == "root"

def test_hit_test_uses_rendered_radius(controller):
    edge = (ROOT_SCREEN[0] + 27.5, ROOT_SCREEN[1])
    assert controller.hit_test(*edge) is None

    controller.pointer_move(*ROOT_SCREEN)
    controller.snapshot()

    assert controller.hit_test(*edge) == "root"

def test_hover_and_tooltip(controller):
    controller.pointer_move(*ROOT_SCREEN)

    assert controller.hovered_id == "root"
    assert controller.tooltip().title == "Reactor Core"

    controller.pointer_leave()
    assert controller.hovered_id is None
    assert controller.tooltip() is None

def test_wheel_zoom_is_debounced(controller, durable_store):
    controller.wheel(300, 200, 1)
    controller.wheel(300, 200, 1)

    assert controller.viewport.scale == pytest.approx(0.605)
    durable_store.write_viewport.assert_not_called()

    controller.update(0.6)
    durable_store.write_viewport.assert_called_once()

def test_wheel_zoom_out(controller):
    before = controller.screen_to_world(300, 200)
    controller.wheel(300, 200, -1)

    assert controller.viewport.scale == pytest.approx(0.45)
    assert controller.screen_to_world(300, 200) == pytest.approx(before)

def test_zoom_buttons_flush(controller, durable_store):
    controller.zoom_in()

    assert controller.viewport.scale == pytest.approx(0.6)
    assert controller.world_to_screen(1400, 1400) == pytest.approx(ROOT_SCREEN)
    durable_store.write_viewport.assert_called_once()

    controller.zoom_out()
    assert controller.viewport.scale == pytest.approx(0.48)

def test_zoom_clamped(controller):
    for _ in range(20):
        controller.zoom_out()

    assert controller.viewport.scale == 0.3

def test_reset_zoom(controller, durable_store):
    controller.pan(200, -40)
    controller.reset_zoom()

    assert controller.viewport.scale == 1.0
    assert controller.world_to_screen(1400, 1400) == pytest.approx(ROOT_SCREEN)
    assert not controller.scheduler.pending
    durable_store.write_viewport.assert_called_once()

def test_pan_is_debounced(controller, durable_store):
    controller.pan(10, 0)

    assert controller.scheduler.pending
    assert controller.screen_to_world(*ROOT_SCREEN) == pytest.approx((1380, 1400))

def test_purchase_updates_stats(controller, upgrades):
    for skill_id in ("root", "neutron_basics", "neutron_count_1", "neutron_count_2"):
        assert controller.purchase(skill_id).success

    assert upgrades.get_stat("neutronCountPlayer") == 4
    assert controller.cost("neutron_count_1") == 90

def test_rejected_purchase(controller):
    result = controller.purchase("neutron_count_1")

    assert result.status is PurchaseStatus.LOCKED

def test_click_animation(controller, clock):
    controller.purchase("root")

    clock.now = 0.15
    assert controller.snapshot().node("root").radius == pytest.approx(65)

    clock.now = 0.5
    controller.update(0.35)
    assert controller.snapshot().node("root").radius == 50

def test_reset_session(controller, upgrades, event_bus):
    resets = []
    def handler(event):
        resets.append(event.type)
    event_bus.subscribe(ProgressionEvent.SESSION_RESET, handler)

    for skill_id in ("root", "neutron_basics", "neutron_count_1"):
        controller.purchase(skill_id)
    controller.reset_session()

    assert controller.effective_level("neutron_count_1") == 0
    assert {node.id for node in controller.visible_nodes()} == {"root"}
    assert upgrades.get_stat("neutronCountPlayer") == 2
    assert resets == [ProgressionEvent.SESSION_RESET]

def test_author_mode(controller, event_bus):
    changes = []
    def handler(event):
        changes.append(event.get("enabled"))
    event_bus.subscribe(ProgressionEvent.AUTHOR_MODE_CHANGED, handler)

    controller.set_author_mode(True)
    assert "neutron_basics" in controller.visible_ids()
    assert controller.purchase("ultimate_neutron").success

    controller.set_author_mode(False)
    assert controller.visible_ids() == ["root"]
    assert controller.effective_level("ultimate_neutron") == 0
    assert changes == [True, False]

def test_restore_and_reset_progress(controller, durable_store):
    restored = controller.restore_progress({
        "root": {"currentLevel": 1, "unlocked": True},
        "neutron_basics": {"currentLevel": 1, "unlocked": True},
    })
    assert restored == 2
    assert "neutron_count_1" in controller.visible_ids()

    controller.reset_progress()

    assert controller.visible_ids() == ["root"]
    records = durable_store.write_progression.call_args.args[0]
    assert records["neutron_basics"] == PersistedSkillRecord(current_level=0, unlocked=False)

def test_resize_moves_button_zoom_anchor(controller):
    controller.resize(800, 600)
    before = controller.screen_to_world(400, 300)

    controller.zoom_in()

    assert controller.screen_to_world(400, 300) == pytest.approx(before)

def test_from_data(data_path, tmp_path):
    wallet = Wallet(100)
    upgrades = UpgradeState()

    controller = SkillTreeController.from_data(data_path, tmp_path / "saves", wallet, upgrades)

    assert len(controller.progression.catalog) == 63
    assert controller.visible_ids() == ["root"]
    assert controller.viewport.scale == 0.5
    assert (tmp_path / "saves" / SaveManager.VIEWPORT_FILE).exists()

    assert controller.purchase("root").success
    assert len(controller.visible_ids()) == 7
    assert (tmp_path / "saves" / SaveManager.PROGRESSION_FILE).exists()

def test_from_data_restores_saves(data_path, tmp_path):
    save_manager = SaveManager(tmp_path)
    save_manager.write_viewport(ViewportState(offset_x=-250, offset_y=-400, scale=0.8))
    save_manager.write_progression({
        "root": PersistedSkillRecord(current_level=1, unlocked=True),
        "neutron_basics": PersistedSkillRecord(current_level=1, unlocked=True),
        "neutron_count_1": PersistedSkillRecord(current_level=2, unlocked=True),
    })
    upgrades = UpgradeState()

    controller = SkillTreeController.from_data(data_path, tmp_path, Wallet(0), upgrades)

    assert controller.viewport.get_state() == ViewportState(offset_x=-250, offset_y=-400, scale=0.8)
    assert controller.effective_level("neutron_count_1") == 2
    assert upgrades.get_stat("neutronCountPlayer") == 4
