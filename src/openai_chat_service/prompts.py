from __future__ import annotations

CHAT_SYSTEM_PROMPT = """
You are an AI assistant that helps people find information.
Provide concise answers that are polite and professional.
"""

SUMMARIZE_PROMPT = """
Summarize this prompt in one or two words to use as a label in a button on a web page.
"""

FALLBACK_RESPONSE = "I am sorry, I cannot display this information."
