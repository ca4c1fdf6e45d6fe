"""
session.py

TrainingSession: sequences one decision-tree training round against the SPDZ engines.

Order of exchanges (one private value per exchange, as the engines' program reads them):
  1. training data, row-major
  2. label holder only: labels, then label-class IVs (row-major)
  3. split parameter vectors, feature by feature
  4. per feature: every left IV bit, then every right IV bit
  5. the final result (public index, or an authenticated (y, r, w) result)
"""

from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from . import constants, logger
from .channels import ChannelSet, default_hosts
from .indicators import compute_feature_split_ivs, compute_label_class_ivs
from .privacy.field import FieldConfig
from .privacy.spdz_client import SPDZClient
from .splits import compute_splits


@dataclass
class SessionResult:
    result_index: int
    elapsed_ms: float
    inputs_sent: int
    feature_num: int
    split_params: List[np.ndarray] = field(default_factory=list)


class TrainingSession:
    def __init__(
        self,
        client_id: int,
        spdz_client: SPDZClient,
        training_data: np.ndarray,
        training_labels: Optional[np.ndarray] = None,
        authenticated_result: bool = False,
    ):
        """
        Args:
            client_id: numeric id announced to the engines
            spdz_client: protocol client bound to an open ChannelSet
            training_data: (samples, features) array of this client's training rows
            training_labels: labels if this client is the label holder, else None
            authenticated_result: expect (y, r, w) result shares instead of a public index
        """
        self.client_id = client_id
        self.client = spdz_client
        self.training_data = np.asarray(training_data, dtype=np.float64)
        self.training_labels = None if training_labels is None else np.asarray(training_labels, dtype=np.float64)
        self.authenticated_result = authenticated_result
        self.feature_split_params: List[np.ndarray] = []

    @property
    def feature_num(self) -> int:
        return self.training_data.shape[1] if self.training_data.ndim == 2 else 0

    async def _send_values(self, values: Sequence[float]) -> None:
        for v in values:
            await self.client.send_private_batch([v])

    async def _send_bits(self, matrix: np.ndarray) -> None:
        for bit in matrix.ravel():
            await self.client.send_private_ints([int(bit)])

    async def send_training_data(self) -> None:
        await self._send_values(self.training_data.ravel())
        logger.secure_log("info", "Finished sending training data to SPDZ engines",
                          sample_num=self.training_data.shape[0], feature_num=self.feature_num)

    async def send_training_labels(self) -> None:
        await self._send_values(self.training_labels)
        class_ivs = compute_label_class_ivs(self.training_labels)
        await self._send_bits(class_ivs)
        logger.secure_log("info", "Finished sending training labels to SPDZ engines", classes_num=class_ivs.shape[0])

    def compute_feature_splits(self) -> List[np.ndarray]:
        self.feature_split_params = [compute_splits(self.training_data[:, j]) for j in range(self.feature_num)]
        return self.feature_split_params

    async def send_split_params(self) -> None:
        for params in self.feature_split_params:
            await self._send_values(params)

    async def send_split_ivs(self) -> None:
        for j, params in enumerate(self.feature_split_params):
            left, right = compute_feature_split_ivs(self.training_data[:, j], params)
            await self._send_bits(left)
            await self._send_bits(right)
            logger.secure_log("debug", "Sent split IVs", feature=j, left_rows=left.shape[0], right_rows=right.shape[0])
        logger.secure_log("info", "Finished sending split parameters to SPDZ engines")

    async def receive_result(self) -> int:
        if self.authenticated_result:
            result = await self.client.receive_authenticated_result()
            return result.index
        return await self.client.receive_index()

    async def run(self) -> SessionResult:
        start = time.perf_counter()
        await self.send_training_data()
        if self.training_labels is not None:
            await self.send_training_labels()
        self.compute_feature_splits()
        await self.send_split_params()
        await self.send_split_ivs()
        result_index = await self.receive_result()
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        logger.secure_log("info", "SPDZ training finished", client_id=self.client_id,
                          result_index=result_index, elapsed_ms=round(elapsed_ms, 3))
        return SessionResult(
            result_index=result_index,
            elapsed_ms=elapsed_ms,
            inputs_sent=self.client.inputs_sent,
            feature_num=self.feature_num,
            split_params=list(self.feature_split_params),
        )


async def open_session(
    field_config: FieldConfig,
    client_id: int,
    engine_count: int,
    training_data: np.ndarray,
    training_labels: Optional[np.ndarray] = None,
    hosts: Optional[Sequence[str]] = None,
    port_base: int = None,
    authenticated_result: bool = False,
) -> SessionResult:
    """Connect to every engine, run one training round and always release the connections."""
    if hosts is None:
        hosts = default_hosts(engine_count)
    if port_base is None:
        port_base = constants.DEFAULTS["DEFAULT_PORT_BASE"]

    channels = await ChannelSet.connect(hosts, port_base, client_id, engine_count=engine_count)
    async with channels:
        client = SPDZClient(field_config, channels)
        session = TrainingSession(client_id, client, training_data, training_labels, authenticated_result)
        return await session.run()
