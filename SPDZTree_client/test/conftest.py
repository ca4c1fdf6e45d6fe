from typing import List, Optional, Sequence

import numpy as np
import pytest

from SPDZTree_client.channels import ChannelSet, QueueEngineChannel
from SPDZTree_client.privacy.field import FieldConfig, FieldElement
from SPDZTree_client.utils.serialization import pack_elements, unpack_elements

TEST_PRIME = (1 << 127) - 1


class FakeEngineCohort:
    """
    In-memory stand-in for a cohort of SPDZ engines. Every value the engines hand out
    (triples, results) is split into random additive shares, one per engine.
    """

    def __init__(self, field: FieldConfig, engine_count: int, seed: int = 1234):
        self.field = field
        self.rng = np.random.default_rng(seed)
        self.engines = [QueueEngineChannel(i) for i in range(engine_count)]
        self.channels = ChannelSet(self.engines)
        self.issued_a: List[FieldElement] = []
        self.masked: List[FieldElement] = []

    def random_element(self) -> FieldElement:
        # 64 extra bits keep the modulo bias negligible
        raw = self.rng.bytes(self.field.element_bytes + 8)
        return self.field.element(int.from_bytes(raw, byteorder="little"))

    def split(self, value: FieldElement) -> List[FieldElement]:
        shares = [self.random_element() for _ in self.engines[:-1]]
        last = value
        for s in shares:
            last = last - s
        return shares + [last]

    def push_elements(self, elements: Sequence[FieldElement]) -> None:
        per_engine = [[] for _ in self.engines]
        for e in elements:
            for j, s in enumerate(self.split(e)):
                per_engine[j].append(s)
        for ch, shares in zip(self.engines, per_engine):
            ch.from_engine.put_nowait(bytes(pack_elements(shares)))

    def push_triples(self, n: int, corrupt_at: Optional[int] = None) -> None:
        elements = []
        for i in range(n):
            a = self.random_element()
            b = self.random_element()
            c = a * b
            if i == corrupt_at:
                c = c + self.field.element(1)
            self.issued_a.append(a)
            elements.extend([a, b, c])
        self.push_elements(elements)

    def push_public(self, value: int) -> None:
        self.engines[0].from_engine.put_nowait(bytes(pack_elements([self.field.from_signed(value)])))

    def sent_frames(self, engine: int) -> List[bytes]:
        q = self.engines[engine].to_engine
        frames = []
        while not q.empty():
            frames.append(q.get_nowait())
        return frames

    def reconstructed_inputs(self) -> List[FieldElement]:
        """What a trusted decoder recovers: masked - a for every input seen so far."""
        return [y - a for y, a in zip(self.masked, self.issued_a)]

    async def serve_inputs(self, count: int) -> None:
        """Answer `count` single-value input exchanges, recording the masked values."""
        for _ in range(count):
            self.push_triples(1)
            frames = [await ch.to_engine.get() for ch in self.engines]
            assert all(f == frames[0] for f in frames)
            self.masked.extend(unpack_elements(frames[0], 1, self.field))

    def drop(self, engine: int) -> None:
        self.engines[engine].from_engine.put_nowait(None)


@pytest.fixture
def field():
    return FieldConfig(prime=TEST_PRIME)


@pytest.fixture
def make_cohort(field):
    def _make(engine_count: int = 2) -> FakeEngineCohort:
        return FakeEngineCohort(field, engine_count)

    return _make
