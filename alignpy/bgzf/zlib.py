"""
Minimal ctypes binding of the system zlib.

Only what reading BGZF blocks needs is bound: one shot raw inflate and CRC32.
On Windows zlib1.dll is looked up on the library path, then zlibwapi.dll next to this file.
"""

import ctypes as C
import platform
from ctypes import util

# zlib.h
MAX_WBITS = 15
ZLIB_VERSION = b"1.2.3"  # Only the major version is checked by inflateInit2_

Z_FINISH = 4

Z_OK = 0
Z_STREAM_END = 1
Z_NEED_DICT = 2
Z_DATA_ERROR = -3
Z_BUF_ERROR = -5


def _load():
    if platform.system() == 'Windows':
        path = util.find_library("zlib1.dll")
        if not path:
            import os

            path = os.path.join(os.path.dirname(os.path.realpath(__file__)), 'zlibwapi.dll')
        return C.windll.LoadLibrary(path)
    return C.cdll.LoadLibrary(util.find_library("z") or "libz.so.1")


_zlib = _load()


class zState(C.Structure):
    """
    z_stream, the state shared with zlib across inflate calls.
    Only the buffer pointers, counters and msg are read from Python, the rest is owned by zlib.
    """
    _fields_ = [
        ("next_in", C.POINTER(C.c_ubyte)),
        ("avail_in", C.c_uint),
        ("total_in", C.c_ulong),
        ("next_out", C.POINTER(C.c_ubyte)),
        ("avail_out", C.c_uint),
        ("total_out", C.c_ulong),
        ("msg", C.c_char_p),
        ("state", C.c_void_p),
        ("zalloc", C.c_void_p),
        ("zfree", C.c_void_p),
        ("opaque", C.c_void_p),
        ("data_type", C.c_int),
        ("adler", C.c_ulong),
        ("reserved", C.c_ulong),
    ]


SIZEOF_ZSTATE = C.sizeof(zState)

_zlib.inflateInit2_.restype = C.c_int
_zlib.inflateInit2_.argtypes = (C.POINTER(zState), C.c_int, C.c_char_p, C.c_int)
_zlib.inflate.restype = C.c_int
_zlib.inflate.argtypes = (C.POINTER(zState), C.c_int)
_zlib.inflateEnd.restype = C.c_int
_zlib.inflateEnd.argtypes = (C.POINTER(zState),)
_zlib.crc32.restype = C.c_ulong
_zlib.crc32.argtypes = (C.c_ulong, C.c_char_p, C.c_uint)


def raw_decompress(src, dest, wbits=MAX_WBITS) -> (int, zState):
    """
    Inflate one complete raw deflate stream with a single call.
    :param src: ctypes c_ubyte array of compressed data.
    :param dest: ctypes c_ubyte array large enough for all of the decompressed data.
    :param wbits: Window size of the stream as log2.
    :return: Tuple containing (zlib return code, final zState). Z_STREAM_END indicates success.
    """
    state = zState()
    if len(src):
        state.next_in = C.cast(src, C.POINTER(C.c_ubyte))
    state.avail_in = len(src)
    if len(dest):
        state.next_out = C.cast(dest, C.POINTER(C.c_ubyte))
    state.avail_out = len(dest)

    err = _zlib.inflateInit2_(C.byref(state), -wbits, ZLIB_VERSION, SIZEOF_ZSTATE)
    if err == Z_OK:
        err = _zlib.inflate(C.byref(state), Z_FINISH)
        _zlib.inflateEnd(C.byref(state))
    return err, state


def crc32(src, crc=0) -> int:
    """
    :param src: Bytes like object.
    :param crc: CRC of the preceding data, to continue a running CRC.
    :return: CRC32 of src.
    """
    src = bytes(src)
    return _zlib.crc32(crc, src, len(src))
