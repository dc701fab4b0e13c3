"""Prompt profiles for the narrative report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from stripworks.libs.prompting import PromptLibrary, PromptProfileBase

from .models import AnalysisSummary

FALLBACK_NARRATIVE = "Analysis complete but no descriptive report generated."


@dataclass(frozen=True)
class NarrativePromptProfile(PromptProfileBase):
    """Template turning an :class:`AnalysisSummary` into a prompt."""

    user_template: str
    system_prompt: Optional[str] = None
    max_tokens: int = 600
    temperature: float = 0.2

    def render_user(self, summary: AnalysisSummary) -> str:
        return self.user_template.format(**summary.prompt_context())

    def messages(self, summary: AnalysisSummary) -> List[Dict[str, str]]:
        messages: List[Dict[str, str]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": self.render_user(summary)})
        return messages


PROFILES: Dict[int, NarrativePromptProfile] = {
    1: NarrativePromptProfile(
        id=1,
        name="technical_audit",
        description="Compact statistics line asking for a 2-3 paragraph analytical report.",
        user_template=(
            "Interpret chemical test result. Stats: "
            "WB Scaling: R={scale_r:.2f}, G={scale_g:.2f}, B={scale_b:.2f}. "
            "Sat: {control_saturation_pct:.1f}%. "
            "Lab A: L={lab_a.l:.1f}, a={lab_a.a:.1f}, b={lab_a.b:.1f}. "
            "Lab B: L={lab_b.l:.1f}, a={lab_b.a:.1f}, b={lab_b.b:.1f}. "
            "Lab TEST: L={lab_test.l:.1f}, a={lab_test.a:.1f}, b={lab_test.b:.1f}. "
            "dE to A: {delta_e_a:.2f}, dE to B: {delta_e_b:.2f}. "
            "Winner %: {winner_pct:.1f}%. "
            "Write professional analytical report (2-3 paras)."
        ),
    ),
    2: NarrativePromptProfile(
        id=2,
        name="field_brief",
        description="Short technician-facing note with an explicit reliability remark.",
        system_prompt=(
            "You help field technicians read colorimetric test strips."
            " Be factual, avoid speculation about the chemistry, and keep it brief."
        ),
        user_template=(
            "White-balance gains (R, G, B): {scale_r:.2f}, {scale_g:.2f}, {scale_b:.2f}\n"
            "Control patch saturation: {control_saturation_pct:.1f}%\n"
            "Reference A Lab: ({lab_a.l:.1f}, {lab_a.a:.1f}, {lab_a.b:.1f})\n"
            "Reference B Lab: ({lab_b.l:.1f}, {lab_b.a:.1f}, {lab_b.b:.1f})\n"
            "TEST Lab: ({lab_test.l:.1f}, {lab_test.a:.1f}, {lab_test.b:.1f})\n"
            "Delta E to A: {delta_e_a:.2f}; to B: {delta_e_b:.2f}\n"
            "Closest reference: {winner} ({winner_pct:.1f}%)\n"
            "In 3 sentences, state the reading and whether the lighting "
            "calibration looks trustworthy."
        ),
        max_tokens=256,
        temperature=0.1,
    ),
}

PROMPT_LIBRARY = PromptLibrary(PROFILES, default_id=1)


def get_prompt_profile(
    identifier: Union[int, str, None], *, strict: bool = False
) -> NarrativePromptProfile:
    return PROMPT_LIBRARY.get(identifier, strict=strict)


def list_prompt_profiles() -> List[NarrativePromptProfile]:
    return PROMPT_LIBRARY.list()
