"""Live-wire boundary tracing engine."""

from livewire.engine.config import ScissorsConfig
from livewire.engine.cooling import PathStabilityTracker
from livewire.engine.cost import INFINITE_COST, NO_LINK, LinkCostModel, quantize_cost
from livewire.engine.errors import ImageTooLargeError, InvalidImageError, LiveWireError, PixelOutOfBoundsError
from livewire.engine.features import FeatureMaps, extract_features
from livewire.engine.image_source import ArrayIntensitySource, load_intensity_source
from livewire.engine.pixel import Pixel
from livewire.engine.search import IncrementalPathSearch, SearchState, StepResult
from livewire.engine.session import BoundarySession, TickSnapshot

__all__ = [
    "ScissorsConfig",
    "PathStabilityTracker",
    "INFINITE_COST",
    "NO_LINK",
    "LinkCostModel",
    "quantize_cost",
    "ImageTooLargeError",
    "InvalidImageError",
    "LiveWireError",
    "PixelOutOfBoundsError",
    "FeatureMaps",
    "extract_features",
    "ArrayIntensitySource",
    "load_intensity_source",
    "Pixel",
    "IncrementalPathSearch",
    "SearchState",
    "StepResult",
    "BoundarySession",
    "TickSnapshot",
]
