import importlib.metadata

from .zircage import (
    init_params,
    prep_model,
    run_model,
    batch_run,
    read_tt_paths_file,
    sec2yr,
    yr2sec,
    yr2myr,
    myr2yr,
)
from .zircon import *

# Versioning
__version__ = importlib.metadata.version("zircage")
