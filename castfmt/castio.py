import struct

import numpy as np


CHUNK_SIZE = 1 << 20


def read_bytes(f, size: int) -> bytes:
    if size <= CHUNK_SIZE:
        data = f.read(size)
    else:
        # sizes come from headers; grow with the data instead of trusting them
        buf = bytearray()
        while len(buf) < size:
            chunk = f.read(min(CHUNK_SIZE, size - len(buf)))
            if not chunk:
                break
            buf.extend(chunk)
        data = bytes(buf)
    if len(data) != size:
        raise EOFError(f"Unexpected end of stream: wanted {size} bytes, got {len(data)}")
    return data

def read_value(fmt, f):
    return struct.unpack(fmt, read_bytes(f, struct.calcsize(fmt)))[0]

def read_values(fmt, f):
    return struct.unpack(fmt, read_bytes(f, struct.calcsize(fmt)))

def write_value(fmt, *values):
    return struct.pack(fmt, *values)

def read_string(f) -> str:
    """Read a null terminated string. Running out of data before the
    terminator is not an error, whatever was read so far is returned."""
    buf = bytearray()
    while True:
        b = f.read(1)
        if not b or b == b'\x00':
            break
        buf.extend(b)
    return buf.decode('utf-8', 'surrogateescape')

def encode_string(s: str) -> bytes:
    return s.encode('utf-8', 'surrogateescape')

def write_string(s: str) -> bytes:
    return encode_string(s) + b'\x00'

def read_array(f, dtype, count: int) -> np.ndarray:
    dtype = np.dtype(dtype)
    if count == 0:
        return np.empty(0, dtype=dtype)
    data = read_bytes(f, dtype.itemsize * count)
    return np.frombuffer(data, dtype=dtype, count=count)

def write_array(values, dtype) -> bytes:
    return np.asarray(values, dtype=dtype).tobytes()
