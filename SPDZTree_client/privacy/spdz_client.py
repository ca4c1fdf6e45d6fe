"""
spdz_client.py

External-client input/output protocol for SPDZ engines
(Damgard et al., "Confidential Benchmarking based on Multiparty Computation", eprint 2015/1006).

Input: for n private values the client
    1) receives n triple shares (a, b, c) from every engine and sums them,
    2) aborts if any summed triple breaks a * b == c (a cheating or faulty engine),
    3) sends y_i = v_i + a_i to every engine, which then derive shares of v_i.
Each call consumes fresh triples; nothing is cached between calls.

Output: engines send shares which the client sums. An authenticated output carries
shares of (y, r, w = y * r) and is accepted only if the sums satisfy y * r == w.
"""

from typing import List, Sequence, Tuple

from .. import constants, logger
from ..channels import ChannelSet
from ..errors import ProtocolViolation, WireFormatError
from ..utils.serialization import pack_elements, unpack_elements
from .field import FieldConfig, FieldElement
from .fixed_point import decode_fixed, encode_fixed
from .protocol_messages import AuthenticatedResult, Triple


class SPDZClient:
    def __init__(self, field: FieldConfig, channels: ChannelSet, fixed_precision: int = None):
        self.field = field
        self.channels = channels
        self.fixed_precision = (
            fixed_precision
            if fixed_precision is not None
            else constants.DEFAULTS.get("SPDZ_FIXED_PRECISION", 8)
        )
        # number of triples consumed so far, for diagnostics only
        self.inputs_sent = 0

    @property
    def engine_count(self) -> int:
        return len(self.channels)

    async def send_public_parameters(self, tree_type: int, global_split_num: int, classes_num: int) -> None:
        """Broadcast the public tree parameters; these are not masked."""
        elements = [self.field.from_signed(int(v)) for v in (tree_type, global_split_num, classes_num)]
        await self.channels.send_all(bytes(pack_elements(elements)))
        logger.secure_log("info", "Sent public parameters", tree_type=tree_type,
                          global_split_num=global_split_num, classes_num=classes_num)

    async def _receive_shares(self, engine: int, count: int) -> bytearray:
        """Exactly `count` packed elements from one engine; any other length is a desync."""
        expected = count * self.field.element_bytes
        buf = await self.channels.receive(engine, max_length=expected)
        if len(buf) != expected:
            logger.secure_zero(buf)
            raise WireFormatError(f"Engine {engine} sent {len(buf)} bytes, expected {expected}")
        return buf

    async def _gather_triples(self, n: int) -> List[Triple]:
        zero = self.field.zero()
        triples = [Triple(zero, zero, zero) for _ in range(n)]
        for j in range(self.engine_count):
            buf = await self._receive_shares(j, 3 * n)
            shares = unpack_elements(buf, 3 * n, self.field)
            logger.secure_zero(buf)
            for i in range(n):
                share = Triple(shares[3 * i], shares[3 * i + 1], shares[3 * i + 2])
                triples[i] = triples[i].accumulate(share)
        return triples

    async def send_private_inputs(self, values: Sequence[FieldElement]) -> None:
        """
        Mask each value with a fresh triple from the engines and broadcast the masked values.
        Raises ProtocolViolation before anything is sent if a triple is inconsistent.
        """
        n = len(values)
        if n == 0:
            return
        triples = await self._gather_triples(n)

        for i, t in enumerate(triples):
            if not t.is_consistent():
                logger.secure_log("error", "Incorrect triple, aborting", position=i)
                raise ProtocolViolation(f"Incorrect triple at {i}, aborting")

        masked = [v + t.a for v, t in zip(values, triples)]
        await self.channels.send_all(bytes(pack_elements(masked)))
        self.inputs_sent += n
        logger.secure_log("debug", "Sent masked private inputs", count=n, engines=self.engine_count)

    async def send_private_batch(self, values: Sequence[float]) -> None:
        """Fixed-point encode real values (scale 2**fixed_precision) and send them as private inputs."""
        encoded = [self.field.from_signed(encode_fixed(v, self.fixed_precision)) for v in values]
        await self.send_private_inputs(encoded)

    async def send_private_ints(self, values: Sequence[int]) -> None:
        await self.send_private_inputs([self.field.from_signed(int(v)) for v in values])

    async def _sum_shares(self, size: int) -> List[FieldElement]:
        output = [self.field.zero() for _ in range(size)]
        for j in range(self.engine_count):
            buf = await self._receive_shares(j, size)
            shares = unpack_elements(buf, size, self.field)
            output = [o + s for o, s in zip(output, shares)]
        return output

    async def receive_result(self, size: int) -> Tuple[List[float], int]:
        """
        Sum `size` shares from every engine. The first size - 1 values are fixed-point
        reals, the last one is an integer index (e.g. the best split).
        The index is not authenticated; see receive_authenticated_result.
        """
        if size < 1:
            raise ValueError("Result size must be at least 1")
        logger.secure_log("info", "Receiving result from the SPDZ engines", size=size)
        output = await self._sum_shares(size)
        values = [decode_fixed(e.to_signed(), self.fixed_precision) for e in output[:-1]]
        index = output[-1].to_signed()
        return values, index

    async def receive_authenticated_result(self) -> AuthenticatedResult:
        y, r, w = await self._sum_shares(3)
        result = AuthenticatedResult(y, r, w)
        if not result.is_valid():
            logger.secure_log("error", "Authenticated result check failed")
            raise ProtocolViolation("Result failed authentication: y * r != w")
        logger.secure_log("info", "Received authenticated result")
        return result

    async def receive_index(self) -> int:
        """Read a single public (already opened) value from the first engine."""
        buf = await self._receive_shares(0, 1)
        (element,) = unpack_elements(buf, 1, self.field)
        return element.to_signed()
