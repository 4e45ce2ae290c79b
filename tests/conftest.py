import numpy as np
import pytest


@pytest.fixture
def time_years():
    """201 time steps of 10 000 years."""
    return np.arange(201) * 1.0e4


@pytest.fixture
def tt_paths_temp():
    """
    Synthetic Tt-paths (columns):

    0: slow cooling 901 -> 651 °C over the whole run (108 steps in 690-825 °C)
    1: fast cooling 901 -> 651 °C in 40 steps, then constant (21 steps)
    2: stays hot at 900 °C (never below the saturation temperature)
    3: stays cold at 600 °C (never above the minimum temperature)
    4: inactive for 50 steps, then cooling 901 -> 651 °C (81 steps)
    """
    nt = 201
    temps = np.zeros((nt, 5))
    temps[:, 0] = np.linspace(901.0, 651.0, nt)
    temps[:41, 1] = np.linspace(901.0, 651.0, 41)
    temps[41:, 1] = 651.0
    temps[:, 2] = 900.0
    temps[:, 3] = 600.0
    temps[50:, 4] = np.linspace(901.0, 651.0, nt - 50)
    return temps
