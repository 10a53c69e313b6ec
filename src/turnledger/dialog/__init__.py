from .expectations import AnswerExpectations, strip_markdown_fences
from .scenario import DialogScenario

__all__ = ["AnswerExpectations", "DialogScenario", "strip_markdown_fences"]
