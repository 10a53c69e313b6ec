from .models import JudgeVerdict
from .runner import JUDGE_SYSTEM_PROMPT, JudgeSession, build_judge_messages

__all__ = ["JUDGE_SYSTEM_PROMPT", "JudgeSession", "JudgeVerdict", "build_judge_messages"]
