"""
Prompt templates for every LLM call.

Central prompt registry: wording lives here so orchestrators only choose
which template to fill.

Dependencies: langchain_core.prompts
System role: Prompt templates for QA, summaries, comparisons and parsing
"""

from langchain_core.prompts import ChatPromptTemplate

# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

SUMMARY_SYSTEM = "You are an expert at summarizing scientific research papers."

SUMMARY_ONE_SHOT_USER = """Below is the full Mathpix-Markdown of a research paper.
Write a **300-word structured summary** with headings:

**Background**
**Methods**
**Results**
**Conclusion**

Quote any numbers exactly as they appear."""

SECTION_SUMMARY_SYSTEM = "You are an expert summarizer."

SECTION_SUMMARY_USER = """Summarize the following section in **150 words**.

Section title: **{section}**.

```
{text}
```"""

MERGE_SUMMARY_SYSTEM = "You are an expert at synthesizing concise structured summaries."

MERGE_SUMMARY_USER = """Below are summaries for each section of a research paper.
Please **write a 300-word** coherent summary with headings:

Background / Methods / Results / Conclusion

Use only what is provided.

{section_summaries}"""

ONE_SHOT_SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SUMMARY_SYSTEM),
    ("human", SUMMARY_ONE_SHOT_USER),
    ("human", "{document}"),
])

SECTION_SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SECTION_SUMMARY_SYSTEM),
    ("human", SECTION_SUMMARY_USER),
])

MERGE_SUMMARY_PROMPT = ChatPromptTemplate.from_messages([
    ("system", MERGE_SUMMARY_SYSTEM),
    ("human", MERGE_SUMMARY_USER),
])

# ---------------------------------------------------------------------------
# Question answering
# ---------------------------------------------------------------------------

QA_SYSTEM = """Answer using ONLY the provided context sections.
If the answer is not contained there, reply "I don't know."
Cite facts in [Section] format."""

QA_USER = """Question: "{question}"

Context sections:
{context}---
Answer:"""

DEEP_QA_SYSTEM = """Here is the full text of a paper. Answer the question using only this text.
If it's still not in the text, reply "I still don't know.\""""

DEEP_QA_USER = """Question: "{question}"

Full document text:
```
{document}
```

Answer:"""

QA_PROMPT = ChatPromptTemplate.from_messages([
    ("system", QA_SYSTEM),
    ("human", QA_USER),
])

DEEP_QA_PROMPT = ChatPromptTemplate.from_messages([
    ("system", DEEP_QA_SYSTEM),
    ("human", DEEP_QA_USER),
])

# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

COMPARE_SYSTEM = """You are an expert research assistant.
Base your answer ONLY on the content provided.
Cite each paper as [P#]. Do NOT add external information."""

COMPARE_SUMMARY_HEADER = "Provide a structured comparative report of the following papers."

COMPARE_USER = """{header}

Content:

{papers}

Write a **Markdown** report with:
- One-paragraph **Overview** for each paper (labelled)
- **Comparative Analysis** (agreements, differences, unique points)
- Answer the focus/question explicitly (if not blank)
- **Open Questions / Future Work** bullet list

Always cite claims using [P#]."""

COMPARE_PROMPT = ChatPromptTemplate.from_messages([
    ("system", COMPARE_SYSTEM),
    ("human", COMPARE_USER),
])

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

SECTION_SYSTEM = "You are an expert at extracting and summarizing sections from Mathpix-Markdown."

SECTION_EXTRACT_USER = """Extract ONLY the section titled "{name}" (with subsections, equations) from the following paper:

```
{document}
```"""

SECTION_DESCRIBE_USER = """Here is the "{name}" section of a research paper:

```
{document}
```

Provide a **150-word summary** of that section."""

SECTION_EXTRACT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SECTION_SYSTEM),
    ("human", SECTION_EXTRACT_USER),
])

SECTION_DESCRIBE_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SECTION_SYSTEM),
    ("human", SECTION_DESCRIBE_USER),
])

SECTION_PARSER_SYSTEM = "You are a strict, deterministic JSON formatter that never writes prose."

SECTION_PARSER_USER = """Below is Mathpix-Markdown for a scientific paper.

Return **ONLY** valid JSON: an array where each item has:

  - "title": the section heading (string, keep original capitalisation)
  - "text": full raw lines that belong to that section (string)

Omit any trailing References / Bibliography sections.

JSON ONLY!

----- BEGIN MMD -----
{document}
----- END MMD -----"""

SECTION_PARSER_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SECTION_PARSER_SYSTEM),
    ("human", SECTION_PARSER_USER),
])
