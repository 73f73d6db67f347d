"""Prompt templates for the four decision passes."""

from __future__ import annotations

SYSTEM_PROMPT = (
    "You are a precise, factual AI assistant analyzing evidence for prediction markets. "
    "Always respond with valid JSON."
)

SEARCH_AND_EXTRACT_PROMPT = """You are analyzing evidence to resolve a prediction market question. Use web search to find current information.

Question: {question}
Description: {description}
Category: {category}

Task: Search the web for information about this question, then extract key facts that are relevant to answering it. For each fact:
1. State the fact clearly
2. List the sources (URLs) that support it
3. Rate your confidence (0-1)
4. Provide supporting evidence (brief quote or summary)

IMPORTANT: Output ONLY a valid JSON object, no other text before or after. Use this exact format:
{{
  "facts": [
    {{
      "statement": "clear factual statement",
      "sources": ["url1", "url2"],
      "confidence": 0.95,
      "supportingEvidence": "brief quote or summary"
    }}
  ],
  "sources": [
    {{
      "url": "https://example.com/article",
      "title": "Article Title",
      "snippet": "Relevant excerpt from the article"
    }}
  ]
}}

Focus on facts that are:
- Verifiable and specific
- Directly relevant to the question
- From credible sources
- Recent and timely

Search query to use: {search_query}"""

CONTRADICTION_CHECK_PROMPT = """You are reviewing extracted facts for contradictions.

Question: {question}

Extracted Facts:
{facts_json}

Task: Identify any facts that contradict each other. Return the same JSON array but with "contradicts" set to true for any contradictory facts.

Consider facts contradictory if they make opposing claims about the same aspect of the question.

Return the JSON array with the contradicts field updated."""

DECIDE_OUTCOME_PROMPT = """You are making a final decision on a prediction market question.

Question: {question}
Description: {description}

Analyzed Facts:
{facts_json}

Task: Decide the outcome and provide reasoning.

For binary markets:
- outcomeId: 0 = NO (did not happen, false)
- outcomeId: 1 = YES (did happen, true)

Return JSON in this exact format:
{{
  "outcomeId": 0 or 1,
  "confidence": 0.0 to 1.0,
  "reasoning": "clear explanation of why this outcome is correct",
  "facts": [copy the facts array here]
}}

Base your decision on:
1. Weight of evidence
2. Source credibility
3. Fact confidence scores
4. Resolution of contradictions
5. Completeness of information

Be conservative - if evidence is insufficient or contradictory, reduce confidence accordingly."""
