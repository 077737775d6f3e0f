import os
import sys
import pytest
from unittest.mock import MagicMock, patch

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent accidental window creation.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.mixer'), \
         patch('pygame.mouse'):

        import pygame
        yield pygame

SAMPLE_SKILLS = [
    {
        "id": "root", "name": "Reactor Core",
        "baseCost": 0, "costMultiplier": 1, "maxLevel": 1, "unlocked": True,
        "children": ["neutron_basics", "atom_basics"],
    },
    {
        "id": "neutron_basics", "name": "Neutron Basics",
        "baseCost": 1, "costMultiplier": 1, "maxLevel": 1,
        "children": ["neutron_count_1", "neutron_speed_1"],
    },
    {
        "id": "neutron_count_1", "name": "Neutron Count I", "description": "+1 neutron per click.",
        "baseCost": 50, "costMultiplier": 1.8, "maxLevel": 5,
        "children": ["neutron_count_2"],
    },
    {
        "id": "neutron_count_2", "name": "Neutron Count II",
        "baseCost": 10, "costMultiplier": 1.5, "maxLevel": 5,
        "children": ["neutron_count_3"],
    },
    {
        "id": "neutron_count_3", "name": "Neutron Count III",
        "baseCost": 10, "costMultiplier": 1.5, "maxLevel": 5,
        "children": ["ultimate_neutron"],
    },
    {
        "id": "neutron_speed_1", "name": "Neutron Speed I",
        "baseCost": 5, "costMultiplier": 1.5, "maxLevel": 5,
        "children": [],
    },
    {
        "id": "atom_basics", "name": "Atom Basics",
        "baseCost": 1, "costMultiplier": 1, "maxLevel": 1,
        "children": ["atom_size_1"],
    },
    {
        "id": "atom_size_1", "name": "Atom Size",
        "baseCost": 5, "costMultiplier": 1.5, "maxLevel": 5,
    },
    {
        "id": "ultimate_neutron", "name": "Neutron Mastery",
        "baseCost": 100, "costMultiplier": 1, "maxLevel": 1,
    },
]

SAMPLE_CELLS = {
    "root": [6, 6],
    "neutron_basics": [6, 5],
    "neutron_count_1": [6, 4],
    "neutron_count_2": [6, 3],
    "neutron_count_3": [6, 2],
    "neutron_speed_1": [8, 2],
    "atom_basics": [8, 5],
    "atom_size_1": [8, 6],
    "ultimate_neutron": [6, 0],
}

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()

@pytest.fixture
def catalog():
    """Small skill catalog with a three-tier neutron count family."""
    from skilltree.catalog import SkillCatalog
    return SkillCatalog.from_entries(SAMPLE_SKILLS)

@pytest.fixture
def graph(catalog):
    from skilltree.graph import ConnectivityGraph
    return ConnectivityGraph(catalog)

@pytest.fixture
def store(catalog, graph):
    """Progression store seeded from the sample catalog."""
    from skilltree.state import ProgressionStore
    return ProgressionStore(catalog, graph)

@pytest.fixture
def wallet():
    from skilltree.interfaces import Wallet
    return Wallet(10_000)

@pytest.fixture
def upgrades():
    from skilltree.interfaces import UpgradeState
    return UpgradeState()

@pytest.fixture
def layout():
    from skilltree.layout import GridLayout
    return GridLayout(SAMPLE_CELLS)

@pytest.fixture
def durable_store():
    """Recording stand-in for the save collaborator."""
    return MagicMock()

@pytest.fixture
def data_path():
    """The shipped data directory."""
    from pathlib import Path
    return Path(__file__).resolve().parent.parent / "data"
