"""Tests for RunnableChain: LangChain Runnables behind the Chain contract."""

import pytest
from langchain_core.language_models.fake import FakeListLLM, FakeStreamingListLLM
from langchain_core.messages import AIMessage
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import PromptTemplate
from langchain_core.runnables import RunnableLambda

from src.chainkit.chains import RunnableChain
from src.chainkit.exceptions import InvalidArgumentError
from src.chainkit.memory import ConversationBufferMemory


def test_runnable_chain_string_result():
    chain = RunnableChain(runnable=RunnableLambda(lambda x: f"Echo: {x['word']}"), input_keys=["word"])
    assert chain.chain_type == "runnable_chain"
    assert chain.output_keys == ["text"]
    assert chain.run("hello") == "Echo: hello"


def test_runnable_chain_message_result():
    chain = RunnableChain(runnable=RunnableLambda(lambda x: AIMessage(content="hi there")), input_keys=["q"])
    assert chain.invoke({"q": "x"}, return_only_outputs=True) == {"text": "hi there"}


def test_runnable_chain_mapping_result():
    runnable = RunnableLambda(lambda x: {"answer": x["q"].upper(), "source": "doc1"})
    chain = RunnableChain(runnable=runnable, input_keys=["q"], output_keys=["answer", "source"])
    assert chain.invoke({"q": "abc"}) == {"q": "abc", "answer": "ABC", "source": "doc1"}


def test_runnable_chain_passes_only_declared_inputs():
    seen = []
    runnable = RunnableLambda(lambda x: seen.append(dict(x)) or "ok")
    chain = RunnableChain(runnable=runnable, input_keys=["q"])
    chain.invoke({"q": "v", "extra": 1})
    assert seen == [{"q": "v"}]


def test_runnable_chain_missing_mapping_key_fails():
    runnable = RunnableLambda(lambda x: {"answer": "a"})
    chain = RunnableChain(runnable=runnable, input_keys=["q"], output_keys=["answer", "source"])
    with pytest.raises(InvalidArgumentError) as exc:
        chain.invoke({"q": "v"})
    assert exc.value.keys == ["source"]


def test_runnable_chain_stream_fills_secondary_keys():
    runnable = RunnableLambda(lambda x: {"answer": "a"})
    chain = RunnableChain(runnable=runnable, input_keys=["q"], output_keys=["answer", "source"])
    elements = list(chain.invoke_stream({"q": "v"}, return_only_outputs=True))
    assert elements == [{"answer": "a", "source": ""}]


def test_runnable_chain_requires_output_key():
    with pytest.raises(InvalidArgumentError):
        RunnableChain(runnable=RunnableLambda(lambda x: x), input_keys=["q"], output_keys=[])


def test_runnable_chain_with_prompt_llm_and_memory():
    memory = ConversationBufferMemory()
    prompt = PromptTemplate.from_template("{history}\nHuman: {question}\nAI:")
    llm = FakeListLLM(responses=["Paris", "About 2 million"])
    chain = RunnableChain(
        runnable=prompt | llm | StrOutputParser(),
        input_keys=["history", "question"],
        memory=memory,
    )
    assert chain.run("Capital of France?") == "Paris"
    assert chain.run("Population?") == "About 2 million"
    assert memory.buffer == "Human: Capital of France?\nAI: Paris\nHuman: Population?\nAI: About 2 million"


def test_runnable_chain_streams_tokens_into_memory():
    memory = ConversationBufferMemory()
    prompt = PromptTemplate.from_template("{history}\nHuman: {question}\nAI:")
    llm = FakeStreamingListLLM(responses=["Hello"])
    chain = RunnableChain(runnable=prompt | llm, input_keys=["history", "question"], memory=memory)
    tokens = list(chain.run_stream("Hi"))
    assert "".join(tokens) == "Hello"
    assert memory.turns[0].human == "Hi"
    assert memory.turns[0].ai == "Hello"
