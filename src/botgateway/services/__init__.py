"""
Bot Gateway services.

- catalog: bot registry and model catalog
- history: API chat history store
- retrieval: retrievers, strategy selection and document capture
- chain: conversational retrieval-augmented generation
- chat_orchestrator: request orchestration and response delivery
"""
