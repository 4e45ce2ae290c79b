from .zircon_data import (
    ZirconAgeData,
    ZirconAgeError,
    PathSelectionError,
    RaggedInputError,
    SaturationCurveError,
)
from .loess import LoessFit
from .saturation import (
    zircon_fraction,
    zircon_saturation_curve,
    loess_fit_zircon_sat,
    compute_number_zircons,
)
from .zircon_ages import (
    TtPath,
    calculate_temperature_stats,
    select_tt_paths,
    clean_inactive_prefix,
    assemble_zircon_ages,
    compute_zircons_ttpath,
    calculate_selected_median_temp,
    compute_zircons_convert_vecs2mat,
    compute_zircons_ttpath_vecs,
)
from .age_pdf import kernel_density, zircon_age_pdf, compute_zircon_age_pdf
