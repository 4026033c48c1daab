"""
Market structure engine (Smart Money Concepts).

Three-layer architecture:
- Detectors: pivot scanning and BOS/CHoCH break classification
- Registry: live pivot set and trend register per structure level
- Engine: orchestrator that ties detectors + registry + result assembly
"""
from .config import StructureConfig
from .engine import StructureEngine
from .errors import ConfigError, DataError, StructureError
