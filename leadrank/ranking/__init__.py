"""
Lead ranking core: persona rubric, LLM scorer, paced batch runner,
per-company rank assignment and the run lifecycle controller.
"""
