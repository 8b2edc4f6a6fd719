from .models import (
    DataPoint,
    FetchError,
    Margin,
    PlotConfig,
    RenderConfig,
    TooltipConfig,
    ZoomConfig,
)
from .errors import (
    CryptoScatterError,
    EmptyDataError,
    InteractionError,
    ValidationError,
)
from .dataset import prepare_dataset
from .scales import LogScale, ScaleSet, SymlogColorScale, build_scales
from .transform import Transform
from .spatial_index import SpatialIndex
from .zoom import ZoomPanController, ZoomState
from .tooltip import TooltipEngine, TooltipState, format_change, format_number
from .polygon import PolygonClient
from .settings import Settings, load_settings

__all__ = [
    "DataPoint",
    "FetchError",
    "Margin",
    "PlotConfig",
    "RenderConfig",
    "TooltipConfig",
    "ZoomConfig",
    # Errors
    "CryptoScatterError",
    "EmptyDataError",
    "InteractionError",
    "ValidationError",
    # Core
    "prepare_dataset",
    "LogScale",
    "ScaleSet",
    "SymlogColorScale",
    "build_scales",
    "Transform",
    "SpatialIndex",
    "ZoomPanController",
    "ZoomState",
    "TooltipEngine",
    "TooltipState",
    "format_change",
    "format_number",
    # Data loading / config
    "PolygonClient",
    "Settings",
    "load_settings",
    # Qt widgets (imported lazily, see __getattr__)
    "ScatterPlotWidget",
    "DashboardWindow",
]


def __getattr__(name):
    # Qt-backed classes are imported on first access.
    if name == "ScatterPlotWidget":
        from .plot_widget import ScatterPlotWidget

        return ScatterPlotWidget
    if name == "DashboardWindow":
        from .dashboard import DashboardWindow

        return DashboardWindow
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
