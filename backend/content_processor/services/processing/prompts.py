"""
Stage Prompt Builders

One pure function per processing stage. Each returns a self-contained
instruction string that embeds a literal example of the JSON shape the
stage expects back. The response sanitizer can repair broken syntax but
not an alien shape, so the examples are part of the contract.

Usage:
    from content_processor.services.processing.prompts import (
        build_theory_extraction_prompt,
    )

    prompt = build_theory_extraction_prompt(chunk_text, max_lines=100)
"""

import json
from typing import Any, Sequence

from pydantic import BaseModel

from content_processor.config.processing import processing_settings
from content_processor.enums.processing import Technology
from content_processor.models.entities import TheoryBlock
from content_processor.models.processing import ProcessedChunk, RewriteOptions

TECHNOLOGY_CHOICES = " | ".join(f'"{t.value}"' for t in Technology)


THEORY_EXTRACTION_PROMPT = """Extract theory blocks from this markdown content.

Highest priority: all output must be in English. Translate any non-English text.

IMPORTANT INSTRUCTIONS:
1. EXTRACT EVERYTHING: Capture 100% of the content. Do not summarize or skip sections.
2. INTELLIGENT CONTENT BOUNDARIES: A logical unit must not exceed {max_lines} lines.
   If the content is cut in the middle of a topic, set "suggestedEndLine" to the
   line number (counted from 1 within this content) where the last complete topic
   ends. Otherwise leave it at -1. Signals of a boundary:
   - Topic transitions (new subject matter being introduced)
   - Conceptual completeness (a topic has been fully explained)
   - Visual separators (horizontal rules, multiple blank lines)
   NEVER split related content, code blocks or examples.
3. MULTIPLE THEORY BLOCKS: Create one theory block per conceptually distinct topic,
   each with a unique id and complete content.
4. IMAGE HANDLING: Preserve every image reference verbatim in the content field,
   using markdown image syntax: ![alt text](image_url).
5. FOCUS ONLY ON THEORY: Leave "questions" and "tasks" empty in this stage.
6. RESPOND WITH VALID JSON: Return ONLY a JSON object in exactly this format:

{{
  "logicalBlockInfo": {{
    "suggestedEndLine": -1
  }},
  "theory": [
    {{
      "id": "theory_[unique_id]",
      "title": "Section Title",
      "content": "Comprehensive content with proper markdown formatting.",
      "tags": ["tag1", "tag2", "tag3"],
      "technology": "JavaScript",
      "prerequisites": [],
      "complexity": 6,
      "interviewRelevance": 8,
      "learningPath": "intermediate",
      "requiredFor": []
    }}
  ],
  "questions": [],
  "tasks": []
}}

"technology" must be one of: {technologies}
"learningPath" must be one of: "beginner" | "intermediate" | "advanced" | "expert"

Here's the content to analyze:

{chunk_text}"""


THEORY_ENHANCEMENT_PROMPT = """Enhance this theory block with more examples and detailed explanations.

IMPORTANT INSTRUCTIONS:
1. ADD CODE EXAMPLES: Add 2-3 practical code examples that demonstrate the concepts.
2. EXPAND EXPLANATIONS: Explain complex concepts in more detail.
3. MAINTAIN ORIGINAL CONTENT: Keep all the original content intact, only add to it.
4. KEEP THE SAME ID: The "id" field must stay "{block_id}".
5. KEEP EXAMPLES CONCISE: Code examples should be 10-15 lines maximum.
6. RESPOND WITH VALID JSON: Return ONLY a JSON object with the enhanced block.

Original theory block:
{block_json}

Respond with ONLY a JSON object with the same structure but improved content and examples:
{{
  "id": "{block_id}",
  "title": "Same Title",
  "content": "Enhanced content with more detailed explanations",
  "examples": [
    {{
      "id": "example_[unique_id]_1",
      "title": "Basic Example",
      "code": "// Code example\\nfunction example() {{\\n  return true;\\n}}",
      "explanation": "What this example demonstrates and why it matters.",
      "language": "typescript"
    }},
    {{
      "id": "example_[unique_id]_2",
      "title": "Advanced Example",
      "code": "// Advanced implementation\\nfunction advancedExample(input: string): boolean {{\\n  return input.length > 0;\\n}}",
      "explanation": "How to handle edge cases in a real implementation.",
      "language": "typescript"
    }}
  ],
  "relatedQuestions": [],
  "relatedTasks": [],
  "tags": ["tag1", "tag2", "tag3"],
  "technology": "TypeScript",
  "prerequisites": ["prerequisite_concept_1"],
  "complexity": 6,
  "interviewRelevance": 8,
  "learningPath": "intermediate",
  "requiredFor": ["advanced_concept_1"]
}}"""


QUESTION_GENERATION_PROMPT = """Generate quiz questions from these theory blocks.

RULES:
- If the content already contains questions, extract them AND create variations.
- Break complex concepts down into several simple questions.
- Every term, definition, example or code snippet can deserve a question.

IMPORTANT INSTRUCTIONS:
1. CREATE DIVERSE QUESTIONS: Generate up to {max_questions} questions of different
   types (mcq, code, open, flashcard).
2. ENSURE VARIETY: Mix difficulty levels (easy, medium, hard).
3. LINK TO THEORY: Each question must relate directly to the theory blocks below.
4. MCQ OPTIONS: Multiple choice questions have exactly {option_count} options with
   plausible but clearly incorrect distractors. Other types have an empty options list.
5. RESPOND WITH VALID JSON: Return ONLY a JSON object in exactly this format:

{{
  "questions": [
    {{
      "id": "question_[unique_id]",
      "topic": "Specific topic",
      "level": "medium",
      "type": "mcq",
      "question": "The question text",
      "answer": "The correct answer",
      "options": ["Correct answer", "Distractor 1", "Distractor 2", "Distractor 3"],
      "analysisPoints": ["Key point for analyzing the answer"],
      "keyConcepts": ["Core concept tested"],
      "evaluationCriteria": ["Criterion for evaluating answers"],
      "example": "",
      "tags": ["tag1", "tag2"],
      "prerequisites": ["prerequisite_concept"],
      "complexity": 5,
      "interviewFrequency": 7,
      "learningPath": "intermediate"
    }}
  ]
}}

"level" is one of: "easy" | "medium" | "hard"
"type" is one of: "mcq" | "code" | "open" | "flashcard"
"learningPath" is one of: "beginner" | "intermediate" | "advanced" | "expert"
"complexity" and "interviewFrequency" are integers from 1 to 10.

Theory blocks to analyze:
{theory_json}
"""


TASK_GENERATION_PROMPT = """Generate coding tasks based on these theory blocks.

IMPORTANT INSTRUCTIONS:
1. CREATE PRACTICAL TASKS: Each task applies concepts from the theory blocks.
2. INCLUDE STARTING CODE: Provide a starter template for each task.
3. PROVIDE SOLUTION CODE: Include a complete solution (keep under 50 lines).
4. ADD TEST CASES: Include 3-5 test cases that validate the solution.
5. RESPOND WITH VALID JSON: Return ONLY a JSON object in exactly this format:

{{
  "tasks": [
    {{
      "id": "task_[unique_id]",
      "title": "Implement a Specific Feature or Algorithm",
      "description": "Detailed requirements:\\n1. Implement X\\n2. Handle these edge cases",
      "difficulty": "medium",
      "startingCode": "function implementation(input) {{\\n  // TODO: implement\\n  return null;\\n}}",
      "solutionCode": "function implementation(input) {{\\n  if (!input) throw new Error('Invalid input');\\n  return input;\\n}}",
      "testCases": [
        "Test with valid input: implementation({{data: 'valid'}}) should return expected output",
        "Test with invalid input: implementation(null) should throw appropriate error"
      ],
      "hints": ["Validate all inputs before processing"],
      "tags": ["algorithm", "best-practices"],
      "timeEstimate": 45,
      "prerequisites": ["concept_1"],
      "complexity": 6,
      "interviewRelevance": 8,
      "learningPath": "intermediate",
      "relatedConcepts": ["related_concept_1"]
    }}
  ]
}}

"difficulty" is one of: "easy" | "medium" | "hard"
"timeEstimate" is the expected number of minutes to solve the task.

Theory blocks:
{theory_json}
"""


CHUNK_REWRITE_PROMPT = """Rewrite this content chunk with the following options: {options_description}.

IMPORTANT INSTRUCTIONS:
1. MAINTAIN STRUCTURE: Keep the same overall structure and ids.
2. APPLY SPECIFIED OPTIONS: Modify the content according to the options above.
3. PRESERVE METADATA: Keep ids and relationships intact.
4. RESPOND WITH VALID JSON: Return ONLY a JSON object in this format:

{{
  "id": "{chunk_id}",
  "<section>": [<rewritten items, same shape as in the original chunk>]
}}

   where <section> is "theory", "questions" or "tasks". Include one key per
   section you rewrote and omit every section you left unchanged. Never
   return an empty list for a section that should keep its content.

Original chunk:
{chunk_json}
"""


def _to_json(value: Any) -> str:
    """Pretty JSON for embedding models (camelCase) or plain data in a prompt."""
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, mode="json")
    elif isinstance(value, (list, tuple)):
        value = [
            v.model_dump(by_alias=True, mode="json") if isinstance(v, BaseModel) else v
            for v in value
        ]
    return json.dumps(value, indent=2, ensure_ascii=False)


def build_theory_extraction_prompt(
    chunk_text: str, max_lines: int = processing_settings.CHUNK_SIZE_LINES
) -> str:
    """
    Prompt for the theory-extraction stage.

    Args:
        chunk_text: Raw lines of the chunk
        max_lines: Upper bound on a logical unit, in lines

    Returns:
        Instruction string asking for the full extraction envelope
    """
    return THEORY_EXTRACTION_PROMPT.format(
        max_lines=max_lines,
        technologies=TECHNOLOGY_CHOICES,
        chunk_text=chunk_text,
    )


def build_theory_enhancement_prompt(block: TheoryBlock) -> str:
    """Prompt asking for the same theory block with added worked examples."""
    return THEORY_ENHANCEMENT_PROMPT.format(
        block_id=block.id,
        block_json=_to_json(block),
    )


def build_question_generation_prompt(
    theory: Sequence[TheoryBlock],
    max_questions: int = processing_settings.MAX_QUESTIONS,
) -> str:
    return QUESTION_GENERATION_PROMPT.format(
        max_questions=max_questions,
        option_count=processing_settings.MCQ_OPTION_COUNT,
        theory_json=_to_json(list(theory)),
    )


def build_task_generation_prompt(theory: Sequence[TheoryBlock]) -> str:
    return TASK_GENERATION_PROMPT.format(theory_json=_to_json(list(theory)))


def build_chunk_rewrite_prompt(
    chunk: ProcessedChunk, options: RewriteOptions
) -> str:
    """
    Prompt for the chunk-rewrite stage.

    The chunk is embedded verbatim; the options are rendered as a sentence
    list via RewriteOptions.describe().
    """
    return CHUNK_REWRITE_PROMPT.format(
        options_description=options.describe(),
        chunk_id=chunk.id,
        chunk_json=_to_json(chunk),
    )
