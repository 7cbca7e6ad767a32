from __future__ import annotations

"""Source attribution tests for model-written answers."""

from qa_app.rag.attribution import (
    attribute_sources,
    attribution_keywords,
    best_excerpt,
    mentioned_documents,
    rank_documents_by_keywords,
)
from qa_app.rag.types import Document


def make_doc(doc_id: int, name: str, content: str) -> Document:
    return Document(id=doc_id, name=name, content=content, size=len(content))


def test_attribution_keywords_split_on_spaces() -> None:
    assert attribution_keywords("How many weeks notice for vacation?") == [
        "many",
        "weeks",
        "notice",
        "vacation?",
    ]


def test_mentioned_by_full_name_or_stem(handbook_documents: list[Document]) -> None:
    answer = "According to policy.txt: two weeks. The Security handbook agrees."

    mentioned = mentioned_documents(answer, handbook_documents)

    assert [document.name for document in mentioned] == ["policy.txt", "security.txt"]


def test_documents_with_empty_stem_are_not_always_mentioned() -> None:
    hidden = make_doc(1, ".env", "Environment variables for the deployment pipeline.")

    assert mentioned_documents("Nothing relevant here.", [hidden]) == []


def test_rank_documents_by_whole_word_occurrences() -> None:
    documents = [
        make_doc(1, "once.txt", "Vacation is mentioned once in this file."),
        make_doc(2, "twice.txt", "Vacation days and more vacation days."),
        make_doc(3, "none.txt", "Vacations are plural and do not count."),
    ]

    ranked = rank_documents_by_keywords(["vacation"], documents)

    assert [document.name for document in ranked] == ["twice.txt", "once.txt"]


def test_rank_documents_keeps_top_three() -> None:
    documents = [make_doc(index, f"doc{index}.txt", "budget " * index) for index in range(1, 6)]

    ranked = rank_documents_by_keywords(["budget"], documents)

    assert [document.name for document in ranked] == ["doc5.txt", "doc4.txt", "doc3.txt"]


def test_best_excerpt_prefers_sentence_with_most_keywords() -> None:
    document = make_doc(
        1,
        "policy.txt",
        "Vacation requests are reviewed by the team lead. "
        "Vacation requests must be submitted 2 weeks in advance with notice. "
        "Approval is manager discretion.",
    )

    excerpt = best_excerpt(document, ["weeks", "notice", "vacation"])

    assert excerpt == "Vacation requests must be submitted 2 weeks in advance with notice"


def test_best_excerpt_keeps_first_sentence_on_ties(policy_document: Document) -> None:
    excerpt = best_excerpt(policy_document, ["vacation", "approval"])

    assert excerpt == "Vacation requests must be submitted 2 weeks in advance"


def test_best_excerpt_none_without_matches(policy_document: Document) -> None:
    assert best_excerpt(policy_document, ["receipts"]) is None


def test_attribute_sources_uses_mentioned_documents(handbook_documents: list[Document]) -> None:
    sources = attribute_sources(
        "How many weeks notice for vacation",
        "According to policy.txt: Vacation requests must be submitted 2 weeks in advance.",
        handbook_documents,
    )

    assert len(sources) == 1
    assert sources[0].document == "policy.txt"
    assert "2 weeks in advance" in sources[0].excerpt


def test_attribute_sources_falls_back_to_keyword_ranking(
    handbook_documents: list[Document],
) -> None:
    sources = attribute_sources(
        "When are expense receipts required",
        "Receipts are needed for larger purchases.",
        handbook_documents,
    )

    assert [source.document for source in sources] == ["expenses.md"]
    assert sources[0].excerpt.startswith("Receipts are required")


def test_attribute_sources_drops_documents_without_excerpt(
    handbook_documents: list[Document],
) -> None:
    sources = attribute_sources(
        "How many weeks notice for vacation",
        "policy.txt and expenses.md and security.txt were consulted.",
        handbook_documents,
    )

    assert [source.document for source in sources] == ["policy.txt"]


def test_attribute_sources_caps_at_three() -> None:
    documents = [
        make_doc(index, f"note{index}.txt", "The budget for this project was approved last week.")
        for index in range(1, 6)
    ]
    answer = "See note1.txt, note2.txt, note3.txt, note4.txt and note5.txt."

    sources = attribute_sources("what is the budget", answer, documents)

    assert [source.document for source in sources] == ["note1.txt", "note2.txt", "note3.txt"]


def test_attribute_sources_empty_when_nothing_matches(
    handbook_documents: list[Document],
) -> None:
    assert attribute_sources("quarterly revenue", "No idea.", handbook_documents) == []
