"""Checkout Advisor: suggested finishing darts for a remaining score.

The tables are reference data. Each value lists the darts of one visit,
separated by ``FINISH_SEPARATOR``; singles are plain numbers, ``D``/``T``
prefixes mark doubles and trebles, ``Bull`` is the 50 bullseye and ``25`` the
outer bull. Remaining scores without an entry get no suggestion, which is not
the same as "no legal finish exists".
"""

from __future__ import annotations

from typing import Dict, List

from ..state.models import OutRule

FINISH_SEPARATOR = " – "

# Double-out finishes. Some entries (e.g. 150) do not add up to their key;
# they are kept as published.
DOUBLE_OUT_FINISHES: Dict[int, str] = {
    2: "D1",
    3: "1 – D1",
    4: "D2",
    5: "1 – D2",
    6: "D3",
    7: "T1 – D2",
    8: "D4",
    9: "1 – D4",
    10: "D5",
    11: "T1 – D4",
    12: "D6",
    13: "1 – D6",
    14: "D7",
    15: "T1 – D6",
    16: "D8",
    17: "1 – D8",
    18: "D9",
    19: "T1 – D8",
    20: "D10",
    21: "1 – D10",
    22: "D11",
    23: "T1 – D10",
    24: "D12",
    25: "5 – D10",
    26: "D13",
    27: "7 – D10",
    28: "D14",
    29: "T3 – D10",
    30: "D15",
    31: "11 – D10",
    32: "D16",
    33: "1 – D16",
    34: "D17",
    35: "3 – D16",
    36: "D18",
    37: "5 – D16",
    38: "D19",
    39: "7 – D16",
    40: "D20",
    41: "1 – D20",
    42: "10 – D16",
    43: "3 – D20",
    44: "12 – D16",
    45: "5 – D20",
    46: "6 – D20",
    47: "7 – D20",
    48: "8 – D20",
    49: "9 – D20",
    50: "Bull",
    51: "11 – D20",
    52: "12 – D20",
    53: "13 – D20",
    54: "14 – D20",
    55: "15 – D20",
    56: "16 – D20",
    57: "17 – D20",
    58: "18 – D20",
    59: "19 – D20",
    60: "20 – D20",
    61: "T11 – D14",
    62: "T10 – D16",
    63: "T13 – D12",
    64: "T16 – D8",
    65: "25 – D20",
    66: "T10 – D18",
    67: "T17 – D8",
    68: "T20 – D4",
    69: "T15 – D12",
    70: "T10 – D20",
    71: "T13 – D16",
    72: "T20 – D6",
    73: "T19 – D8",
    74: "T14 – D16",
    75: "T17 – D12",
    76: "T20 – D8",
    77: "T19 – D10",
    78: "T18 – D12",
    79: "T19 – D11",
    80: "T20 – D10",
    81: "T19 – D12",
    82: "T14 – D20",
    83: "T17 – D16",
    84: "T20 – D12",
    85: "T15 – D20",
    86: "T18 – D16",
    87: "T17 – D18",
    88: "T20 – D14",
    89: "T19 – D16",
    90: "T20 – D15",
    91: "T17 – D20",
    92: "T20 – D16",
    93: "T19 – D18",
    94: "T18 – D20",
    95: "T19 – D19",
    96: "T20 – D18",
    97: "T19 – D20",
    98: "T20 – D19",
    99: "T19 – 10 – D16",
    100: "T20 – D20",
    101: "T20 – 9 – D16",
    102: "T20 – 10 – D16",
    103: "T20 – 3 – D20",
    104: "T20 – 12 – D16",
    105: "T20 – 13 – D16",
    106: "T20 – 14 – D16",
    107: "T19 – 10 – D20",
    108: "T20 – 16 – D16",
    109: "T20 – 9 – D20",
    110: "T20 – 10 – D20",
    111: "T20 – 11 – D20",
    112: "T20 – 12 – D20",
    113: "T20 – 13 – D20",
    114: "T20 – 14 – D20",
    115: "T20 – 15 – D20",
    116: "T20 – 16 – D20",
    117: "T20 – 17 – D20",
    118: "T20 – 18 – D20",
    119: "T20 – 19 – D20",
    120: "T20 – 20 – D20",
    121: "T20 – 11 – Bull",
    122: "T18 – 18 – Bull",
    123: "T20 – T13 – D12",
    124: "T20 – T16 – D8",
    125: "T20 – T15 – D10",
    126: "T19 – 19 – Bull",
    127: "T20 – T17 – D8",
    128: "T18 – T14 – D16",
    129: "T19 – T16 – D12",
    130: "T20 – T20 – D5",
    131: "T20 – T13 – Bull",
    132: "T20 – T16 – D12",
    133: "T20 – T19 – D8",
    134: "T20 – T14 – D16",
    135: "T20 – T17 – D12",
    136: "T20 – T20 – D8",
    137: "T20 – T19 – D10",
    138: "T20 – T18 – D12",
    139: "T20 – T19 – D11",
    140: "T20 – T20 – D10",
    141: "T20 – T19 – D12",
    142: "T20 – T14 – Bull",
    143: "T20 – T17 – D16",
    144: "T20 – T20 – D12",
    145: "T20 – T15 – Bull",
    146: "T20 – T18 – D16",
    147: "T20 – T17 – D18",
    148: "T20 – T20 – D14",
    149: "T20 – T19 – D16",
    150: "T20 – T18 – Bull",
    151: "T20 – T17 – Bull",
    152: "T20 – T20 – D16",
    153: "T20 – T19 – D18",
    154: "T20 – T18 – Bull",
    155: "T20 – T19 – Bull",
    156: "T20 – T20 – D18",
    157: "T20 – T19 – Bull",
    158: "T20 – T20 – D19",
    160: "T20 – T20 – D20",
    161: "T20 – T17 – Bull",
    164: "T20 – T18 – Bull",
    167: "T20 – T19 – Bull",
    170: "T20 – T20 – Bull",
}

# Master-out finishes: the last dart may be a double, a treble or the bull.
MASTER_OUT_FINISHES: Dict[int, str] = {
    2: "D1",
    3: "T1",
    4: "D2",
    5: "1 – D2",
    6: "D3",
    7: "1 – D3",
    8: "D4",
    9: "T3",
    10: "D5",
    11: "1 – D5",
    12: "D6",
    13: "1 – D6",
    14: "D7",
    15: "T5",
    16: "D8",
    17: "1 – D8",
    18: "D9",
    19: "1 – D9",
    20: "D10",
    21: "T7",
    22: "D11",
    23: "1 – D11",
    24: "D12",
    25: "1 – D12",
    26: "D13",
    27: "T9",
    28: "D14",
    29: "1 – D14",
    30: "D15",
    31: "1 – D15",
    32: "D16",
    33: "T11",
    34: "D17",
    35: "1 – D17",
    36: "D18",
    37: "1 – D18",
    38: "D19",
    39: "T13",
    40: "D20",
    41: "1 – D20",
    42: "T14",
    43: "1 – T14",
    44: "2 – T14",
    45: "T15",
    46: "1 – T15",
    47: "2 – T15",
    48: "T16",
    49: "1 – T16",
    50: "Bull",
    51: "T17",
    52: "1 – T17",
    53: "2 – T17",
    54: "T18",
    55: "1 – T18",
    56: "2 – T18",
    57: "T19",
    58: "1 – T19",
    59: "2 – T19",
    60: "T20",
    61: "1 – T20",
    62: "2 – T20",
    63: "3 – T20",
    64: "4 – T20",
    65: "5 – T20",
    66: "6 – T20",
    67: "7 – T20",
    68: "8 – T20",
    69: "9 – T20",
    70: "10 – T20",
    71: "11 – T20",
    72: "12 – T20",
    73: "13 – T20",
    74: "14 – T20",
    75: "15 – T20",
    76: "16 – T20",
    77: "17 – T20",
    78: "18 – T20",
    79: "19 – T20",
    80: "20 – T20",
    81: "T7 – T20",
    82: "D11 – T20",
    83: "D13 – T19",
    84: "T8 – T20",
    85: "25 – T20",
    86: "D13 – T20",
    87: "T9 – T20",
    88: "D14 – T20",
    89: "D16 – T19",
    90: "T10 – T20",
    91: "D17 – T19",
    92: "D16 – T20",
    93: "T11 – T20",
    94: "D17 – T20",
    95: "D19 – T19",
    96: "T12 – T20",
    97: "D20 – T19",
    98: "D19 – T20",
    99: "T13 – T20",
    100: "D20 – T20",
    101: "Bull – T17",
    102: "T14 – T20",
    103: "T14 – 1 – T20",
    104: "Bull – T18",
    105: "T15 – T20",
    106: "T15 – 1 – T20",
    107: "Bull – T19",
    108: "T16 – T20",
    109: "T16 – 1 – T20",
    110: "Bull – T20",
    111: "T17 – T20",
    112: "T17 – 1 – T20",
    113: "T17 – 2 – T20",
    114: "T18 – T20",
    115: "T18 – 1 – T20",
    116: "T18 – 2 – T20",
    117: "T19 – T20",
    118: "T19 – 1 – T20",
    119: "T19 – 2 – T20",
    120: "T20 – T20",
    121: "T20 – 1 – T20",
    122: "T20 – 2 – T20",
    123: "T20 – 3 – T20",
    124: "T20 – 4 – T20",
    125: "T20 – 5 – T20",
    126: "T20 – 6 – T20",
    127: "T20 – 7 – T20",
    128: "T20 – 8 – T20",
    129: "T20 – 9 – T20",
    130: "T20 – 10 – T20",
    131: "T20 – 11 – T20",
    132: "T20 – 12 – T20",
    133: "T20 – 13 – T20",
    134: "T20 – 14 – T20",
    135: "T20 – 15 – T20",
    136: "T20 – 16 – T20",
    137: "T20 – 17 – T20",
    138: "T20 – 18 – T20",
    139: "T20 – 19 – T20",
    140: "T20 – 20 – T20",
    141: "T20 – T7 – T20",
    142: "T20 – D11 – T20",
    143: "T19 – D13 – T20",
    144: "T20 – T8 – T20",
    145: "T20 – 25 – T20",
    146: "T20 – D13 – T20",
    147: "T20 – T9 – T20",
    148: "T20 – D14 – T20",
    149: "T19 – D16 – T20",
    150: "T20 – T10 – T20",
    151: "T19 – D17 – T20",
    152: "T20 – D16 – T20",
    153: "T20 – T11 – T20",
    154: "T20 – D17 – T20",
    155: "T19 – D19 – T20",
    156: "T20 – T12 – T20",
    157: "T19 – D20 – T20",
    158: "T20 – D19 – T20",
    159: "T20 – T13 – T20",
    160: "T20 – D20 – T20",
    161: "T17 – Bull – T20",
    162: "T20 – T14 – T20",
    164: "T18 – Bull – T20",
    165: "T20 – T15 – T20",
    167: "T19 – Bull – T20",
    168: "T20 – T16 – T20",
    170: "T20 – Bull – T20",
    171: "T20 – T17 – T20",
    174: "T20 – T18 – T20",
    177: "T20 – T19 – T20",
    180: "T20 – T20 – T20",
}


def finish_table(out_rule: OutRule) -> Dict[int, str]:
    """Return the suggestion table for the out-rule (empty for straight-out)."""

    if out_rule is OutRule.DOUBLE:
        return DOUBLE_OUT_FINISHES
    if out_rule is OutRule.MASTER:
        return MASTER_OUT_FINISHES
    return {}


def finish_segments(remaining: int, out_rule: OutRule) -> List[str]:
    """Split the suggested checkout for ``remaining`` into dart labels."""

    if remaining <= 1:
        return []
    finish = finish_table(out_rule).get(remaining)
    if not finish:
        return []
    return finish.split(FINISH_SEPARATOR)


def has_single_dart_finish(remaining: int) -> bool:
    """True when the double-out table finishes ``remaining`` with one double or the bull."""

    segments = finish_segments(remaining, OutRule.DOUBLE)
    return len(segments) == 1 and (segments[0] == "Bull" or segments[0].startswith("D"))


__all__ = [
    "DOUBLE_OUT_FINISHES",
    "FINISH_SEPARATOR",
    "MASTER_OUT_FINISHES",
    "finish_segments",
    "finish_table",
    "has_single_dart_finish",
]
