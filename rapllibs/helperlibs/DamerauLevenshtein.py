# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2021 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Jan-Kristian Herring

"""
Find the closest string from a set of strings. Used for suggesting a valid command-line argument
when the user mistypes one.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from typing import Iterable

def _osa_distance(first: str, second: str) -> int:
    """
    Calculate the optimal string alignment distance between two strings. This is the
    Damerau-Levenshtein distance where a substring is edited at most once.

    Args:
        first: The first string.
        second: The second string.

    Returns:
        The number of deletions, insertions, substitutions and adjacent transpositions needed to
        turn 'first' into 'second'.
    """

    rows = len(first) + 1
    cols = len(second) + 1

    dist = [[0] * cols for _ in range(rows)]
    for idx in range(rows):
        dist[idx][0] = idx
    for idx in range(cols):
        dist[0][idx] = idx

    for fdx in range(1, rows):
        for sdx in range(1, cols):
            cost = 0 if first[fdx-1] == second[sdx-1] else 1

            dist[fdx][sdx] = min(dist[fdx-1][sdx] + 1,         # Deletion.
                                 dist[fdx][sdx-1] + 1,         # Insertion.
                                 dist[fdx-1][sdx-1] + cost)    # Substitution.

            if fdx > 1 and sdx > 1 and first[fdx-1] == second[sdx-2] and \
               first[fdx-2] == second[sdx-1]:
                # Transposition.
                dist[fdx][sdx] = min(dist[fdx][sdx], dist[fdx-2][sdx-2] + cost)

    return dist[rows-1][cols-1]

def closest_match(string: str,
                  strings: Iterable[str],
                  max_distance: int = 2,
                  case_sensitive: bool = False) -> str | None:
    """
    Find the string closest to 'string' in 'strings'.

    Args:
        string: The string to find a match for.
        strings: The candidate strings.
        max_distance: The largest distance a match may have.
        case_sensitive: Whether the comparison is case-sensitive.

    Returns:
        The closest candidate (as it appears in 'strings'), or None if no candidate is within
        'max_distance'.
    """

    if case_sensitive:
        options = {option: option for option in strings}
    else:
        options = {option.lower(): option for option in strings}
        string = string.lower()

    best_score = max_distance + 1
    best = None
    for option, orig in options.items():
        score = _osa_distance(string, option)
        if score < best_score:
            best_score = score
            best = orig

    return best
