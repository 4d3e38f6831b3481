"""
Sentence splitting for comment prose.

Uses a blank spaCy English pipeline with a rule-based sentencizer. Only the
period ends a sentence: Ruby method names such as `#include?` or `#map!`
would otherwise cut sentences in half.
"""
import threading
from dataclasses import dataclass
from typing import List

import spacy

_local = threading.local()


@dataclass(frozen=True)
class Sentence:
    text: str
    # Character index of the sentence inside the text that was split.
    start: int


def _pipeline():
    # spaCy pipelines are not shared between worker threads.
    nlp = getattr(_local, 'nlp', None)
    if nlp is None:
        nlp = spacy.blank('en')
        nlp.add_pipe('sentencizer', config={'punct_chars': ['.']})
        _local.nlp = nlp
    return nlp


def split_sentences(text: str) -> List[Sentence]:
    """Split prose into sentences, keeping each sentence's offset into `text`."""
    if not text or not text.strip():
        return []
    doc = _pipeline()(text.replace('\n', ' '))
    sentences = []
    for sent in doc.sents:
        stripped = sent.text.lstrip()
        if not stripped.strip():
            continue
        start = sent.start_char + (len(sent.text) - len(stripped))
        sentences.append(Sentence(text=text[start:start + len(stripped.rstrip())], start=start))
    return sentences
