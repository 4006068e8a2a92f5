"""
Service: accusation.py
- Traduit le libellé affiché d'un membre d'équipage vers son rôle canonique.
- Compare au rôle secret et produit un verdict déterministe (issue + narration fixe).

Un libellé absent de la table est considéré comme déjà canonique (pas de rejet).
"""
from __future__ import annotations

from dataclasses import dataclass

from .game_state import OUTCOME_DEFEAT, OUTCOME_VICTORY

DISPLAY_TO_ROLE = {
    "선장": "Captain",
    "엔지니어": "Engineer",
    "의사": "Doctor",
    "파일럿": "Pilot",
}

VICTORY_MESSAGE = (
    "TARTARUS SYSTEM: [TARGET TERMINATED]. 관찰 결과: 하얀색 유체(White Fluid) 식별됨. "
    "안드로이드 배신자 제거 성공."
)
DEFEAT_MESSAGE = (
    "TARTARUS SYSTEM: [TARGET TERMINATED]. 관찰 결과: 붉은 혈액(Red Blood) 식별됨. "
    "무고한 승무원 사망. 미션 실패."
)


@dataclass(frozen=True)
class Verdict:
    accused_role: str
    outcome: str
    message: str

    @property
    def correct(self) -> bool:
        return self.outcome == OUTCOME_VICTORY


def canonical_role(target_name: str) -> str:
    return DISPLAY_TO_ROLE.get(target_name, target_name)


def resolve_accusation(target_name: str, secret_role: str) -> Verdict:
    """Verdict d'une accusation : victoire si le rôle canonique est le rôle secret."""
    accused = canonical_role(target_name)
    if accused == secret_role:
        return Verdict(accused_role=accused, outcome=OUTCOME_VICTORY, message=VICTORY_MESSAGE)
    return Verdict(accused_role=accused, outcome=OUTCOME_DEFEAT, message=DEFEAT_MESSAGE)


def execution_line(target_name: str) -> str:
    return f"[SYSTEM] {target_name} 처형 완료."
