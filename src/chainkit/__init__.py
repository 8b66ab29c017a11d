"""chainkit: the execution contract for composable chains.

A chain accepts named inputs, produces named outputs and can recall and
persist conversational context through an injected memory.

Architecture:
    - **chains/**: Chain contract, streaming primitives, sequential and Runnable chains
    - **memory/**: Memory interface and an in-process conversation buffer
    - **observability/**: Chain call tracing
    - **config.py**: Settings (pydantic-settings, `.env` aware)
    - **exceptions.py**: Error hierarchy

Quick Start:
    ```python
    from langchain_core.prompts import PromptTemplate
    from src.chainkit.chains import RunnableChain
    from src.chainkit.memory import ConversationBufferMemory

    chain = RunnableChain(
        runnable=PromptTemplate.from_template("{history}\nHuman: {question}") | llm,
        input_keys=["history", "question"],
        memory=ConversationBufferMemory(),
    )
    answer = chain.run("What is RAG?")
    ```
"""

from .config import get_settings

__all__ = ["get_settings"]
