"""
Canned edit instructions offered next to the prompt box.

Selecting a preset copies its text verbatim into the prompt.
"""
from typing import List, Optional

from models.image_edit import PresetPrompt

PRESETS: List[PresetPrompt] = [
    PresetPrompt(
        label="High Quality Portrait",
        text=(
            "Enhance this image to high quality DSLR portrait, improve skin texture, hair details, "
            "lighting, strict consistency with original face and pose."
        ),
        icon="✨",
    ),
    PresetPrompt(
        label="Cyberpunk Vibe",
        text=(
            "Give this image a futuristic cyberpunk neon aesthetic with blue and pink lighting, "
            "while keeping the subject recognizable."
        ),
        icon="🌃",
    ),
    PresetPrompt(
        label="Professional Studio",
        text="Change background to a clean professional dark studio backdrop, soft rim lighting, high contrast.",
        icon="📸",
    ),
    PresetPrompt(
        label="Sketch Style",
        text="Convert this image into a high detail pencil sketch drawing.",
        icon="✏️",
    ),
    PresetPrompt(
        label="High Fidelity Enhancement",
        text=(
            "첨부 사진의 얼굴, 표정, 헤어, 포즈, 형태 엄격히 일관성을 유지하면서 다음의 명령을 수행, "
            "Ensure face, emotion, camera angle, pose strict consistency with the reference image[no change]. "
            "화질개선, 옷질감 피부결, 눈썹, 머리결, 동공반사, 디테일업, 고화질 dslr, ai느낌이 아닌 실제 사람 사진"
        ),
        icon="🍌",
    ),
]


def get_preset(label: str) -> Optional[PresetPrompt]:
    """Find a preset by its label (case-insensitive)"""
    wanted = label.strip().lower()
    for preset in PRESETS:
        if preset.label.lower() == wanted:
            return preset
    return None
