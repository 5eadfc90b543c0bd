from enum import Enum
from typing import Any, Tuple


class ResponseShape(str, Enum):
    """JSON shape a model response is expected to have."""
    RESUME = "resume"
    JOB_DESCRIPTION = "job_description"
    STRING_LIST = "string_list"

    @property
    def is_array(self) -> bool:
        return self is ResponseShape.STRING_LIST

    @property
    def brackets(self) -> Tuple[str, str]:
        return ("[", "]") if self.is_array else ("{", "}")

    def matches(self, value: Any) -> bool:
        return isinstance(value, list) if self.is_array else isinstance(value, dict)
