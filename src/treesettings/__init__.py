from .errors import TreeSettingsError, InvalidPath, NotFound, StructuralMismatch, FormatError, CoercionFailure
from .path.hierarchical_path import HierarchicalPath, ABSOLUTE_ROOT, RELATIVE_ROOT
from .path.tree import HierarchicalPathTree
from .settings.options import SettingSearchOptions
from .settings.record import SettingsRecord
from .settings.registry import SettingsTypeRegistry, default_registry
from .settings.snapshot import SettingsSnapshot, SnapshotEntry
from .settings.manager import SettingsManager
from .text.macro import MacroExpansion, MacroExpansionContext, VariableMacroSegment
