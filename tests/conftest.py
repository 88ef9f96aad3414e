"""Pytest configuration for spheretrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear the device scene before and after each test."""
    # Import here so field declarations happen after ti.init
    from src.spheretrace.scene.intersection import clear_scene

    clear_scene()
    yield
    clear_scene()


@pytest.fixture
def seeded_stream():
    """Seed stream 0 with a fixed state and return its index."""
    from src.spheretrace.core.sampling import seed_streams

    seed_streams([2463534242])
    return 0
