"""
PaperDesk backend package.

Research-paper workspace core: extraction, chunking, embedding, vector
indexing and LLM orchestration over documents kept in object storage.
"""
