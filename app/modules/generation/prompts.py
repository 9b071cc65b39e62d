"""Provider-agnostic prompt text for every content kind.

Every builder spells out the exact JSON shape the parser and validator expect,
so a well-behaved model needs no repair at all.
"""

from __future__ import annotations

import json
from typing import Optional

from app.modules.generation.models import ContentKind, Difficulty

SOURCE_TEXT_LIMIT = 15000

QUIZ_SYSTEM_PROMPT = (
    "You are a high-quality JSON-only quiz generator. Return only valid JSON."
)
FLASHCARDS_SYSTEM_PROMPT = (
    "You are a high-quality JSON-only flashcard generator. Return only valid JSON."
)
STUDY_SET_SYSTEM_PROMPT = (
    "You are a high-quality JSON-only study set generator. Return only valid JSON."
)

DIFFICULTY_DESCRIPTIONS = {
    Difficulty.EASY: (
        "suitable for beginners with basic knowledge. Questions should be "
        "straightforward with clear answers."
    ),
    Difficulty.MEDIUM: (
        "suitable for intermediate learners with some experience. Questions should "
        "require understanding and application of concepts."
    ),
    Difficulty.HARD: (
        "suitable for advanced learners with deep understanding. Questions should "
        "be challenging and require critical thinking."
    ),
}

DIFFICULTY_EXAMPLES = {
    Difficulty.EASY: 'Example: "What does HTML stand for?"',
    Difficulty.MEDIUM: (
        'Example: "How does the JavaScript event loop handle asynchronous operations?"'
    ),
    Difficulty.HARD: (
        'Example: "Explain the implications of using WeakMap versus Map in terms of '
        'garbage collection and memory management."'
    ),
}

DIFFICULTY_FOCUS = {
    Difficulty.EASY: "basic recall and understanding",
    Difficulty.MEDIUM: "application and analysis",
    Difficulty.HARD: "synthesis and evaluation",
}

NO_FENCES_RULES = (
    "- DO NOT include markdown code blocks (```json or ```)\n"
    "- DO NOT include any explanatory text before or after the JSON\n"
    "- Ensure all strings are properly escaped\n"
    "- Return ONLY the raw JSON object"
)


def _quiz_prompt(topic: str, n: int, difficulty: Optional[Difficulty]) -> str:
    level = difficulty or Difficulty.MEDIUM
    return (
        "You are an expert educational quiz generator. Generate a high-quality, "
        "pedagogically sound quiz.\n\n"
        "QUIZ SPECIFICATIONS\n"
        f"- Topic: {topic}\n"
        f"- Number of Questions: {n}\n"
        f"- Difficulty Level: {level.value.upper()}\n"
        f"  {DIFFICULTY_DESCRIPTIONS[level]}\n"
        f"  {DIFFICULTY_EXAMPLES[level]}\n\n"
        "QUESTION REQUIREMENTS\n"
        "1. Each question must be clear, specific, and educational\n"
        "2. Each question must have exactly 4 distinct options\n"
        "3. Only ONE option should be definitively correct\n"
        "4. All options must be plausible and relevant\n"
        f"5. Questions should test {DIFFICULTY_FOCUS[level]}\n"
        "6. Avoid ambiguous or trick questions\n"
        "7. Distribute correct answers evenly across all positions (0, 1, 2, 3)\n\n"
        "OUTPUT FORMAT (STRICT JSON ONLY)\n"
        "Return ONLY valid JSON in this exact format:\n"
        "{\n"
        '  "questions": [\n'
        "    {\n"
        '      "questionText": "Your well-crafted question here?",\n'
        '      "options": ["First option", "Second option", "Third option", "Fourth option"],\n'
        '      "correctAnswer": 2\n'
        "    }\n"
        "  ]\n"
        "}\n\n"
        "CRITICAL RULES\n"
        '- "correctAnswer" MUST be an INTEGER (0, 1, 2, or 3) representing the index\n'
        "- DO NOT include explanations for answers\n"
        f"{NO_FENCES_RULES}\n\n"
        f"Generate exactly {n} questions now."
    )


def _flashcards_prompt(topic: str, n: int, difficulty: Optional[Difficulty]) -> str:
    guidance = ""
    if difficulty is not None:
        guidance = (
            f"- Pitched at {difficulty.value} level: {DIFFICULTY_DESCRIPTIONS[difficulty]}\n"
        )
    return (
        f'You are a flashcard generator. Create {n} educational flashcards about "{topic}".\n\n'
        "Each flashcard should have:\n"
        '- A "front" (question, term, or concept to learn)\n'
        '- A "back" (answer, definition, or explanation)\n\n'
        "The flashcards should be:\n"
        "- Educational and accurate\n"
        "- Clear and concise\n"
        "- Progressive in difficulty (easy to hard)\n"
        "- Covering different aspects of the topic\n"
        f"{guidance}\n"
        "Return this exact JSON structure:\n"
        "{\n"
        f'  "topic": {json.dumps(topic, ensure_ascii=False)},\n'
        '  "cards": [\n'
        '    {"front": "Question or term here", "back": "Answer or explanation here"}\n'
        "  ]\n"
        "}\n\n"
        "RULES\n"
        f"{NO_FENCES_RULES}\n\n"
        f"Generate {n} flashcards now."
    )


def _study_set_prompt(
    topic: str,
    n: int,
    difficulty: Optional[Difficulty],
    source_text: Optional[str],
) -> str:
    if source_text and source_text.strip():
        material = (
            "ANALYZE THE FOLLOWING TEXT AND GENERATE A COMPREHENSIVE STUDY SET.\n\n"
            f"TOPIC: {topic}\n"
            "TEXT TO ANALYZE:\n"
            f'"{source_text.strip()[:SOURCE_TEXT_LIMIT]}"\n\n'
        )
    else:
        material = f"GENERATE A COMPREHENSIVE STUDY SET ABOUT: {topic}\n\n"
    level = ""
    if difficulty is not None:
        level = f"6. Target {difficulty.value} learners: {DIFFICULTY_DESCRIPTIONS[difficulty]}\n"
    return (
        f"{material}"
        "RETURN ONLY A JSON OBJECT WITH THIS STRUCTURE:\n"
        "{\n"
        '  "summary": "A concise, bullet-point summary of the key concepts (max 5 points).",\n'
        '  "podcastScript": [\n'
        '    {"speaker": "Host", "text": "Introductory sentence setting the stage."},\n'
        '    {"speaker": "Expert", "text": "Explaining the first core concept simply."}\n'
        "  ],\n"
        '  "flashcards": [\n'
        '    {"front": "Concept or term", "back": "Definition or explanation"}\n'
        "  ],\n"
        '  "quiz": [\n'
        '    {"questionText": "Question?", "options": ["A", "B", "C", "D"], "correctAnswer": 0}\n'
        "  ]\n"
        "}\n\n"
        "CRITICAL INSTRUCTIONS:\n"
        '1. The podcast script must be conversational, 6-8 exchanges, speakers "Host" and "Expert".\n'
        f"2. Generate exactly {n} flashcards focused on high-yield facts.\n"
        f"3. Generate exactly {n} quiz questions, each with exactly 4 options; "
        '"correctAnswer" is the 0-based INTEGER index of the correct option.\n'
        "4. Quiz questions should test understanding, not just rote memory.\n"
        "5. The summary should be digestible.\n"
        f"{level}"
        f"{NO_FENCES_RULES}\n"
    )


def build_prompt(
    kind: ContentKind,
    topic: str,
    item_count: int,
    difficulty: Optional[Difficulty] = None,
    source_text: Optional[str] = None,
) -> str:
    """Return the user prompt for ``kind``. Pure; same inputs, same text."""
    n = int(item_count)
    if kind == ContentKind.QUIZ:
        return _quiz_prompt(topic, n, difficulty)
    if kind == ContentKind.FLASHCARDS:
        return _flashcards_prompt(topic, n, difficulty)
    return _study_set_prompt(topic, n, difficulty, source_text)


SYSTEM_PROMPTS = {
    ContentKind.QUIZ: QUIZ_SYSTEM_PROMPT,
    ContentKind.FLASHCARDS: FLASHCARDS_SYSTEM_PROMPT,
    ContentKind.STUDY_SET: STUDY_SET_SYSTEM_PROMPT,
}


def system_instruction_for(kind: ContentKind) -> str:
    return SYSTEM_PROMPTS[kind]
