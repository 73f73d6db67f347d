"""
Decision pipeline.

Four strictly sequential passes over one market question:
- extract_facts: web-backed search and fact extraction
- check_contradictions: flag facts that disagree (best effort)
- decide_outcome: pick the outcome and a confidence
- build_citations: weight the discovered sources by the facts citing them
"""
