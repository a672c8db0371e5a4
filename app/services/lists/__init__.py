"""Army list services.

Provides:
- Share-link codec (codec.py)
- Text export (formatting.py)
- Army building rules (validation.py)
- Saved list storage (repository.py)
"""

from .codec import (
    ListCodecError,
    compress,
    decode_list,
    decompress,
    encode_list,
    generate_shareable_link,
    is_temporary_list,
    project_list,
)
from .formatting import (
    filter_units_for_courtesy,
    generate_list_text,
    get_faction_name,
    total_command,
    total_points,
)
from .validation import ValidationResult, add_unit_to_list, validate_unit_addition

__all__ = [
    # Codec
    "ListCodecError",
    "compress",
    "decompress",
    "project_list",
    "encode_list",
    "decode_list",
    "is_temporary_list",
    "generate_shareable_link",
    # Formatting
    "generate_list_text",
    "filter_units_for_courtesy",
    "get_faction_name",
    "total_points",
    "total_command",
    # Validation
    "ValidationResult",
    "validate_unit_addition",
    "add_unit_to_list",
]
