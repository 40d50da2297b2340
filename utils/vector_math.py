"""Cosine similarity helpers (float64 internally)"""
from typing import List, Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (||a|| * ||b||); 0.0 when either vector has zero norm."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise ValueError(f"Dimension mismatch: {va.shape} vs {vb.shape}")

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """
    Similarity of one query against every row of an (N, D) matrix.

    Rows with zero norm score 0.0, as does everything when the query has zero norm.
    """
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    if m.size == 0:
        return np.zeros(0, dtype=np.float64)
    if m.ndim != 2 or m.shape[1] != q.shape[0]:
        raise ValueError(f"Dimension mismatch: query {q.shape} vs matrix {m.shape}")

    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(m, axis=1)
    if q_norm == 0.0:
        return np.zeros(m.shape[0], dtype=np.float64)

    denominators = row_norms * q_norm
    dots = m @ q
    scores = np.zeros(m.shape[0], dtype=np.float64)
    nonzero = denominators > 0.0
    scores[nonzero] = dots[nonzero] / denominators[nonzero]
    return scores


def top_k_indices(scores: np.ndarray, k: int) -> List[int]:
    """Indices of the k highest scores, highest first; ties keep input order."""
    if k <= 0 or scores.size == 0:
        return []
    order = np.argsort(-scores, kind="stable")
    return order[:k].tolist()
