"""Prompt templates for each metadata generation stage."""

from quizgen.schemas.quiz_schema import BaseMetadata, TaxonomyTerm
from quizgen.services.taxonomy import COGNITIVE_GOALS


def _cognitive_goal_lines() -> str:
    hints = {
        24: "recall facts, memorize information",
        25: "comprehend concepts, explain ideas",
        26: "use knowledge in new situations",
        27: "break down information, examine relationships",
        28: "make judgments, assess quality",
        29: "produce new content, synthesize ideas",
    }
    return "\n".join(f"- {g.id}: {g.label} ({hints[g.id]})" for g in COGNITIVE_GOALS)


def build_base_metadata_prompt(
    subject: TaxonomyTerm,
    education_level: TaxonomyTerm,
    difficulty: TaxonomyTerm,
) -> str:
    return (
        "You are classifying an educational quiz. The subject, education level and difficulty "
        "have ALREADY been chosen and MUST NOT be changed:\n"
        f"- subject: {{\"id\": {subject.id}, \"label\": \"{subject.label}\"}}\n"
        f"- education_level: {{\"id\": {education_level.id}, \"label\": \"{education_level.label}\"}}\n"
        f"- difficulty: {{\"id\": {difficulty.id}, \"label\": \"{difficulty.label}\"}}\n"
        "\n"
        "Your only task is to choose the COGNITIVE GOAL that best fits this combination:\n"
        f"{_cognitive_goal_lines()}\n"
        "\n"
        "Respond with EXACTLY this JSON format (keep the fixed values, fill in cognitive_goal):\n"
        "{\n"
        f"  \"subject\": {{\"id\": {subject.id}, \"label\": \"{subject.label}\"}},\n"
        f"  \"education_level\": {{\"id\": {education_level.id}, \"label\": \"{education_level.label}\"}},\n"
        f"  \"difficulty\": {{\"id\": {difficulty.id}, \"label\": \"{difficulty.label}\"}},\n"
        "  \"cognitive_goal\": {\"id\": 25, \"label\": \"Understand\"}\n"
        "}\n"
        "\n"
        "CRITICAL REQUIREMENTS:\n"
        "- Respond with EXACTLY ONE JSON object, no additional text or multiple objects\n"
        "- Use the exact field names: subject, education_level, difficulty, cognitive_goal\n"
        "- Each field must have both \"id\" (integer) and \"label\" (string)\n"
        "- DO NOT generate multiple JSON objects - only ONE!"
    )


def build_topic_prompt(metadata: BaseMetadata) -> str:
    labels = metadata.labels()
    return (
        "Generate an educational quiz topic that perfectly fits the following metadata requirements:\n"
        "\n"
        f"Subject: {labels['subject']}\n"
        f"Education Level: {labels['education_level']}\n"
        f"Difficulty: {labels['difficulty']}\n"
        f"Cognitive Goal: {labels['cognitive_goal']}\n"
        "\n"
        "The topic should:\n"
        "1. Be appropriate for the specified education level\n"
        "2. Match the difficulty level (Easy = basic concepts, Medium = intermediate understanding, "
        "Hard = advanced/complex concepts)\n"
        "3. Align with the cognitive goal (Remember = factual recall, Understand = comprehension, "
        "Apply = using knowledge, Analyze = breaking down concepts, Evaluate = making judgments, "
        "Create = producing new content)\n"
        "4. Fit within the subject area\n"
        "5. Be specific enough for focused quiz questions\n"
        "\n"
        "Examples of appropriate topics:\n"
        "- For Science + Grade 3-6 + Easy + Remember: \"parts of a plant\"\n"
        "- For Mathematics & Statistics + Grade 9-12 + Medium + Apply: \"solving quadratic equations\"\n"
        "- For Social Sciences + Undergraduate + Hard + Analyze: \"economic factors in the great depression\"\n"
        "\n"
        "Generate only the topic text. Do not include quotes, explanations, or additional formatting."
    )


def build_prompt_and_title_prompt(topic: str, metadata: BaseMetadata) -> str:
    labels = metadata.labels()
    return (
        "You are an experienced educator creating a quiz. Based on the topic below, write a quiz "
        "prompt and a title for it.\n"
        "\n"
        f"Topic: \"{topic}\"\n"
        "\n"
        "Context for alignment:\n"
        f"- Subject: {labels['subject']}\n"
        f"- Education Level: {labels['education_level']}\n"
        f"- Difficulty: {labels['difficulty']}\n"
        f"- Cognitive Goal: {labels['cognitive_goal']}\n"
        "\n"
        "The quiz prompt should:\n"
        "1. Clearly define what knowledge will be tested\n"
        "2. Specify the scope and focus of the quiz content\n"
        "3. Be written in a professional, educational tone\n"
        "4. Provide enough detail for quiz generation, as a single paragraph\n"
        "\n"
        "The title should:\n"
        "1. Be concise (max 100 characters)\n"
        "2. Be engaging and clear\n"
        "3. Incorporate the cognitive goal when possible (e.g., \"Understanding...\", \"Applying...\")\n"
        "\n"
        "Example:\n"
        "PROMPT: Create a comprehensive quiz testing knowledge of Canada's provinces and territories, "
        "including capitals, geography and economic activities, suitable for middle school students.\n"
        "TITLE: Remembering Canadian Provinces\n"
        "\n"
        "Respond with EXACTLY two lines and nothing else:\n"
        "PROMPT: <quiz prompt>\n"
        "TITLE: <quiz title>"
    )
