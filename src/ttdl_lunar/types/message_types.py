from typing import Dict, List, TypedDict

# One group of a field collection: {"due": "2000-01-01"}
FieldGroupTD = Dict[str, str]


class _PluginMessageBaseTD(TypedDict):
    description: str
    specialTags: List[FieldGroupTD]


class PluginMessageTD(_PluginMessageBaseTD, total=False):
    optional: List[FieldGroupTD]
