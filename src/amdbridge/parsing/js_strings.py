from __future__ import annotations
"""JavaScript string literal codec.

``decode_js_string`` turns the raw text of a quoted literal (quotes included)
into its runtime value; ``encode_js_string`` produces a literal that evaluates
back to a given value, using the requested quote character.

Notes:
    - Legacy octal escapes and line continuations are honoured when decoding.
    - Surrogate pairs written as two ``\\uXXXX`` escapes are combined; lone
      surrogates survive decoding and are re-escaped when encoding.
"""

from typing import List

_SIMPLE_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'b': '\b',
    'f': '\f',
    'v': '\v',
}

_LINE_TERMINATORS = ('\n', '\r', '\u2028', '\u2029')

_OCTAL = '01234567'
_HEX = '0123456789abcdefABCDEF'


def _read_hex(body: str, i: int, count: int) -> tuple[int, int]:
    digits = body[i:i + count]
    if len(digits) != count or any(c not in _HEX for c in digits):
        raise ValueError(f'malformed hexadecimal escape at offset {i}')
    return int(digits, 16), i + count


def decode_js_string(raw: str) -> str:
    """Return the value of the quoted JavaScript string literal *raw*."""
    if len(raw) < 2 or raw[0] not in ('"', "'") or raw[-1] != raw[0]:
        raise ValueError(f'not a quoted string literal: {raw[:20]!r}')
    body = raw[1:-1]
    if '\\' not in body:
        return body

    out: List[str] = []
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch != '\\':
            out.append(ch)
            i += 1
            continue

        i += 1
        if i >= n:
            raise ValueError('dangling backslash in string literal')
        esc = body[i]

        if esc in _LINE_TERMINATORS:
            # Line continuation; '\r\n' counts as a single terminator.
            i += 2 if body.startswith('\r\n', i) else 1
            continue
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 1
            continue
        if esc in _OCTAL:
            j = i
            limit = 3 if esc in '0123' else 2
            while j < n and j - i < limit and body[j] in _OCTAL:
                j += 1
            out.append(chr(int(body[i:j], 8)))
            i = j
            continue
        if esc == 'x':
            code, i = _read_hex(body, i + 1, 2)
            out.append(chr(code))
            continue
        if esc == 'u':
            if body.startswith('{', i + 1):
                end = body.find('}', i + 2)
                if end == -1:
                    raise ValueError(f'unterminated code point escape at offset {i}')
                out.append(chr(int(body[i + 2:end], 16)))
                i = end + 1
            else:
                code, i = _read_hex(body, i + 1, 4)
                out.append(chr(code))
            continue

        out.append(esc)
        i += 1

    value = ''.join(out)
    return value.encode('utf-16-le', 'surrogatepass').decode('utf-16-le', 'surrogatepass')


def encode_js_string(value: str, quote: str = '"') -> str:
    """Return a JavaScript string literal, delimited by *quote*, whose value is *value*."""
    if quote not in ('"', "'"):
        raise ValueError(f'unsupported quote character: {quote!r}')
    out: List[str] = [quote]
    for ch in value:
        code = ord(ch)
        if ch == quote or ch == '\\':
            out.append('\\' + ch)
        elif ch == '\n':
            out.append('\\n')
        elif ch == '\r':
            out.append('\\r')
        elif ch == '\t':
            out.append('\\t')
        elif code < 0x20 or code == 0x7F:
            out.append(f'\\x{code:02x}')
        elif ch in ('\u2028', '\u2029') or 0xD800 <= code <= 0xDFFF:
            out.append(f'\\u{code:04x}')
        else:
            out.append(ch)
    out.append(quote)
    return ''.join(out)
