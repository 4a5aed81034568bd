# -*- coding: utf-8 -*-

"""
PyMSF core (_msf variants)
- scan_directory_msf
- pack_msf, pack_iter_msf, unpack_msf
- archive_to_array_msf, archivefilelistfiles_msf, archivefilevalidate_msf
- make_empty_file_msf
"""
import os
import io
import sys
import stat
import struct
import configparser as _configparser

__program_name__ = "PyMSF"
__project__ = __program_name__
__project_url__ = "https://github.com/GameMaker2k/PyMSF"
__version_info__ = (0, 3, 1, "RC 1", 1)
__version_date_info__ = (2026, 10, 16, "RC 1", 1)
__version_date__ = str(__version_date_info__[0]) + "." + str(
    __version_date_info__[1]).zfill(2) + "." + str(__version_date_info__[2]).zfill(2)
__revision__ = __version_info__[3]
__revision_id__ = "$Id$"
if(__version_info__[4] is not None):
    __version_date_plusrc__ = __version_date__ + \
        "-" + str(__version_date_info__[4])
if(__version_info__[4] is None):
    __version_date_plusrc__ = __version_date__
if(__version_info__[3] is not None):
    __version__ = str(__version_info__[0]) + "." + str(__version_info__[
        1]) + "." + str(__version_info__[2]) + " " + str(__version_info__[3])
if(__version_info__[3] is None):
    __version__ = str(__version_info__[0]) + "." + str(__version_info__[1]) + "." + str(__version_info__[2])

MSF_MAGIC = b"\x00\x00\x03\xE7\x00\x00\x00\x02"
MSF_MAX_NAMELEN = 255  # the length field is a single byte
MSF_HEADER_SIZE = len(MSF_MAGIC) + 4
MSF_ENTRY_FIXED_SIZE = 4 + 4 + 1
MSF_MAX_U32 = 0xFFFFFFFF
MSF_BUFFER_SLACK = 1024 * 1024
MODE_DIR_DEFAULT = 0o755

__file_format_name__ = "MSF"
__file_format_magic__ = MSF_MAGIC
__file_format_len__ = len(MSF_MAGIC)
__file_format_hex__ = MSF_MAGIC.hex()

__all__ = [
    'MSFError', 'FormatError', 'BadMagicError', 'MSFIOError', 'AllocationError',
    'MSF_MAGIC', 'MSF_MAX_NAMELEN', 'MSF_HEADER_SIZE',
    'scan_directory_msf', 'pack_msf', 'pack_iter_msf', 'unpack_msf',
    'archive_to_array_msf', 'archivefilelistfiles_msf', 'archivefilevalidate_msf',
    'make_empty_file_msf', 'make_empty_archive_file_msf', 'printable_name',
]

# ------------- errors -------------

class MSFError(Exception):
    """Base class for every failure raised by the MSF codec."""

class FormatError(MSFError, ValueError):
    """The archive bytes do not describe a valid MSF archive."""

class BadMagicError(FormatError):
    """The first bytes of the input are not the MSF magic."""

class MSFIOError(MSFError, IOError):
    """A file or directory could not be opened, listed, read or written."""

class AllocationError(MSFError, MemoryError):
    """The copy buffer could not be grown."""

def printable_name(s, stream=None):
    """Render a name for a text stream, escaping what its encoding cannot hold."""
    enc = getattr(stream or sys.stdout, 'encoding', None) or 'utf-8'
    return s.encode(enc, 'backslashreplace').decode(enc, 'replace')

def _warn(msg):
    sys.stderr.write("warning: %s\n" % (printable_name(msg, sys.stderr),))

def _report(verbose, msg):
    if verbose:
        print(printable_name(msg))

# ------------- fixed-width integers -------------

_U32BE = struct.Struct('>I')
_U8 = struct.Struct('>B')

def _pack_u32be(v):
    v = int(v)
    if v < 0 or v > MSF_MAX_U32:
        raise ValueError('value does not fit in 32 bits: %r' % (v,))
    return _U32BE.pack(v)

def _unpack_u32be(data):
    if len(data) != _U32BE.size:
        raise ValueError('expected 4 bytes, got %d' % len(data))
    return _U32BE.unpack(data)[0]

def _pack_u8(v):
    v = int(v)
    if v < 0 or v > 0xFF:
        raise ValueError('value does not fit in 8 bits: %r' % (v,))
    return _U8.pack(v)

def _unpack_u8(data):
    if len(data) != _U8.size:
        raise ValueError('expected 1 byte, got %d' % len(data))
    return _U8.unpack(data)[0]

# ------------- formatspecs / INI -------------

def _decode_escape(s):
    # Handle \xNN and common escapes
    try:
        return s.encode('latin1').decode('unicode_escape').encode('latin1')
    except (UnicodeError, ValueError):
        return s.encode('latin1', 'replace')

def _default_formatspecs():
    return {
        'format_name': __file_format_name__,
        'format_magic': MSF_MAGIC,
        'buffer_slack': MSF_BUFFER_SLACK,
    }

def _load_formatspecs_from_ini(paths=None, prefer_section=None):
    cands = []
    if paths:
        if isinstance(paths, (list, tuple)):
            cands.extend(paths)
        else:
            cands.append(paths)
    p = os.environ.get('PYMSF_INI')
    if p: cands.append(p)
    cands.extend(['msftool.ini'])
    picked = None
    for p in cands:
        if os.path.isfile(p):
            picked = p
            break
    if not picked:
        return None
    cp = _configparser.ConfigParser(interpolation=None)
    with io.open(picked, 'r', encoding='utf-8', errors='ignore') as f:
        cp.read_file(f)
    if prefer_section and cp.has_section(prefer_section):
        sec = prefer_section
    elif cp.has_section('config') and cp.has_option('config','default') and cp.has_section(cp.get('config','default')):
        sec = cp.get('config','default')
    else:
        sec = next((s for s in cp.sections() if s.lower() != 'config'), None)
    if not sec:
        return None
    fs = _default_formatspecs()
    fs['format_name'] = sec
    if cp.has_option(sec, 'magic'):
        fs['format_magic'] = _decode_escape(cp.get(sec, 'magic'))
    if cp.has_option(sec, 'bufslack'):
        fs['buffer_slack'] = cp.getint(sec, 'bufslack')
    return fs

def _check_formatspecs(fs):
    magic = fs['format_magic']
    if isinstance(magic, str):
        magic = _decode_escape(magic)
    if len(magic) != len(MSF_MAGIC):
        raise ValueError('format magic must be %d bytes, got %d' % (len(MSF_MAGIC), len(magic)))
    fs['format_magic'] = bytes(magic)
    if int(fs['buffer_slack']) < 0:
        raise ValueError('buffer_slack must not be negative')
    return fs

def _ensure_formatspecs(specs=None):
    if specs and isinstance(specs, dict):
        fs = dict(_default_formatspecs())
        fs.update(specs)
        return _check_formatspecs(fs)
    env = _load_formatspecs_from_ini()
    return _check_formatspecs(env or _default_formatspecs())

# ------------- I/O helpers -------------

def _open_in(infile):
    """Return (fp, should_close). Accepts path, bytes/bytearray, or file-like."""
    if hasattr(infile, 'read'):
        return infile, False
    if isinstance(infile, (bytes, bytearray)):
        return io.BytesIO(infile), True
    if infile is None:
        raise ValueError('infile is None')
    try:
        return io.open(infile, 'rb'), True
    except OSError as e:
        raise MSFIOError("could not open `%s` for reading: %s" % (infile, e.strerror or e)) from e

def _open_out(outfile):
    """Return (buffer_mode, fp, buf). If buffer_mode True, collect into bytes."""
    if outfile in (None, '-', b'-'):
        return True, None, bytearray()
    if hasattr(outfile, 'write'):
        return False, outfile, None
    try:
        fp = io.open(outfile, 'wb')
    except OSError as e:
        raise MSFIOError("could not open `%s` for writing: %s" % (outfile, e.strerror or e)) from e
    return False, fp, None

class _Dst(object):
    """Write sink over a file object or a bytearray; counts bytes written."""
    def __init__(self, bufmode, fp, buf, name=None):
        self.bufmode = bufmode
        self.fp = fp
        self.buf = buf
        self.name = name
        self.written = 0

    def write(self, data):
        if self.bufmode:
            self.buf.extend(data)
        else:
            try:
                self.fp.write(data)
            except OSError as e:
                raise MSFIOError("could not write to `%s`: %s" % (self.name, e.strerror or e)) from e
        self.written += len(data)

def _archive_size(fp):
    pos = fp.tell()
    fp.seek(0, os.SEEK_END)
    end = fp.tell()
    fp.seek(pos, os.SEEK_SET)
    return end

def _read_exact(fp, n, what):
    data = fp.read(n)
    if len(data) != n:
        raise FormatError("truncated archive: expected %d bytes for %s, got %d" % (n, what, len(data)))
    return data

# ------------- copy buffer -------------

def _grow_buffer(buf, need, slack):
    """Return a buffer holding at least `need` bytes, reusing `buf` when it already does."""
    if buf is not None and len(buf) >= need:
        return buf
    size = need + int(slack)
    try:
        return bytearray(size)
    except (MemoryError, OverflowError) as e:
        raise AllocationError("out of memory allocating %d bytes" % size) from e

def _copy_into(buf, fp, n):
    """Read exactly n bytes from fp into the front of buf; return how many were read."""
    view = memoryview(buf)[:n]
    got = 0
    while got < n:
        r = fp.readinto(view[got:])
        if not r:
            break
        got += r
    return got

# ------------- names -------------

def _clamp_name(raw, where):
    if len(raw) > MSF_MAX_NAMELEN:
        _warn("%s has name longer than %d bytes (%d), truncating" % (where, MSF_MAX_NAMELEN, len(raw)))
        return raw[:MSF_MAX_NAMELEN]
    return raw

def _name_bytes(name):
    if isinstance(name, (bytes, bytearray)):
        return bytes(name)
    return os.fsencode(name)

def _is_safe_name(raw):
    if not raw or raw.startswith((b'/', b'\\')) or b'\x00' in raw:
        return False
    if len(raw) >= 2 and raw[1:2] == b':':
        return False
    segments = raw.replace(b'\\', b'/').split(b'/')
    return b'..' not in segments

def _make_entry(fid, name, size, where=None, path=None):
    raw = _clamp_name(_name_bytes(name), where or "entry %d" % fid)
    return {
        'fpath': path,
        'fid': fid,
        'fname': os.fsdecode(raw),
        'fnamelen': len(raw),
        'fsize': int(size),
        'foffset': 0,
    }

def _warn_duplicates(entries):
    seen = set()
    for ent in entries:
        if ent['fname'] in seen:
            _warn("duplicate name `%s` in table; later entry overwrites earlier on unpack" % ent['fname'])
        seen.add(ent['fname'])

# ------------- header / table -------------

def _entry_table_size(namelen):
    return MSF_ENTRY_FIXED_SIZE + int(namelen)

def _write_header(dst, fs, numfiles):
    dst.write(fs['format_magic'] + _pack_u32be(numfiles))

def _parse_header(fp, fs):
    magic = fp.read(len(fs['format_magic']))
    if magic != fs['format_magic']:
        raise BadMagicError("invalid %s magic: %r" % (fs['format_name'], bytes(magic)))
    return _unpack_u32be(_read_exact(fp, 4, "file count"))

def _build_table_entry(ent):
    raw = os.fsencode(ent['fname'])
    return (_pack_u32be(ent['foffset']) + _pack_u32be(ent['fsize']) +
            _pack_u8(len(raw)) + raw)

def _parse_table_entry(fp, index):
    where = "table entry %d" % index
    ofs = _unpack_u32be(_read_exact(fp, 4, where + " offset"))
    length = _unpack_u32be(_read_exact(fp, 4, where + " length"))
    namelen = _unpack_u8(_read_exact(fp, 1, where + " name length"))
    raw = _clamp_name(_read_exact(fp, namelen, where + " name"), "entry %d" % index)
    return {
        'fid': index,
        'fname': os.fsdecode(raw),
        'fnamelen': len(raw),
        'fsize': length,
        'foffset': ofs,
    }

def _assign_offsets(entries):
    """Lay the data section out after header and table; return datastart."""
    datastart = MSF_HEADER_SIZE + sum(_entry_table_size(e['fnamelen']) for e in entries)
    curofs = datastart
    for ent in entries:
        if ent['fsize'] > MSF_MAX_U32:
            raise FormatError("`%s` is too large for MSF (%d bytes)" % (ent['fname'], ent['fsize']))
        if curofs > MSF_MAX_U32:
            raise FormatError("offset of `%s` does not fit in 32 bits (%d)" % (ent['fname'], curofs))
        ent['foffset'] = curofs
        curofs += ent['fsize']
    return datastart

def _write_table(dst, fs, entries, datastart):
    _write_header(dst, fs, len(entries))
    for ent in entries:
        dst.write(_build_table_entry(ent))
    # data starts where the header and table end
    if dst.written != datastart:
        raise MSFError("table size mismatch: wrote %d bytes, expected datastart %d" % (dst.written, datastart))

# ------------- scanning -------------

def _walk(dirpath, relbase, fid):
    try:
        names = os.listdir(dirpath)
    except OSError as e:
        raise MSFIOError("could not open directory `%s`: %s" % (dirpath, e.strerror or e)) from e
    out = []
    for name in names:
        # skip hidden files
        if name.startswith('.'):
            continue
        path = os.path.join(dirpath, name)
        try:
            st = os.stat(path)
        except OSError as e:
            raise MSFIOError("couldn't stat `%s`: %s" % (path, e.strerror or e)) from e
        rel = relbase + '/' + name if relbase else name
        if stat.S_ISDIR(st.st_mode):
            sub = _walk(path, rel, fid + len(out))
            out.extend(sub)
        elif stat.S_ISREG(st.st_mode):
            out.append(_make_entry(fid + len(out), rel, st.st_size, "`%s`" % path, path))
    return out

def scan_directory_msf(dirpath):
    entries = _walk(dirpath, '', 0)
    _warn_duplicates(entries)
    return entries

# ------------- public parse -------------

def _read_table(fp, fs):
    numfiles = _parse_header(fp, fs)
    entries = []
    # read all entries first to reduce seeking
    for i in range(numfiles):
        entries.append(_parse_table_entry(fp, i))
    return numfiles, entries

def archive_to_array_msf(infile, formatspecs=None):
    fs = _ensure_formatspecs(formatspecs)
    fp, need_close = _open_in(infile)
    try:
        numfiles, entries = _read_table(fp, fs)
        datastart = fp.tell()
        return {
            'fformat': fs['format_name'],
            'fnumfiles': numfiles,
            'fdatastart': datastart,
            'farchivesize': _archive_size(fp),
            'ffilelist': entries,
        }
    finally:
        if need_close:
            fp.close()

def _check_bounds(arr):
    for ent in arr['ffilelist']:
        if not _is_safe_name(os.fsencode(ent['fname'])):
            raise FormatError("entry %d has unsafe name `%s`" % (ent['fid'], ent['fname']))
        end = ent['foffset'] + ent['fsize']
        if end > arr['farchivesize']:
            raise FormatError("entry %d (`%s`) extends past end of archive (%d > %d)" % (
                ent['fid'], ent['fname'], end, arr['farchivesize']))

# ------------- builders (packing) -------------

def _emit_archive(entries, outfile, fs, fetch, verbose=False):
    datastart = _assign_offsets(entries)
    bufmode, fp, buf = _open_out(outfile)
    name = outfile if isinstance(outfile, str) else getattr(fp, 'name', None)
    dst = _Dst(bufmode, fp, buf, name)
    try:
        _report(verbose, "\nwriting msf:")
        _write_table(dst, fs, entries, datastart)
        copybuf = None
        for ent in entries:
            _report(verbose, "... %s" % ent['fname'])
            # ensure copy buffer is large enough
            copybuf = _grow_buffer(copybuf, ent['fsize'], fs['buffer_slack'])
            fetch(ent, copybuf)
            dst.write(memoryview(copybuf)[:ent['fsize']])
    finally:
        if not bufmode and fp is not outfile:
            fp.close()
    if bufmode:
        return bytes(buf)
    return True

def pack_msf(indir, outfile=None, formatspecs=None, verbose=False):
    fs = _ensure_formatspecs(formatspecs)
    _report(verbose, "scanning directory `%s`:" % indir)
    # recursively walk target directory
    entries = scan_directory_msf(indir)

    def fetch(ent, copybuf):
        path = ent['fpath']
        try:
            with io.open(path, 'rb') as fin:
                got = _copy_into(copybuf, fin, ent['fsize'])
        except OSError as e:
            raise MSFIOError("could not read `%s`: %s" % (path, e.strerror or e)) from e
        if got != ent['fsize']:
            raise MSFIOError("short read on `%s`: expected %d bytes, got %d" % (path, ent['fsize'], got))

    return _emit_archive(entries, outfile, fs, fetch, verbose)

def _iter_items(items):
    if isinstance(items, dict):
        items = list(items.items())
    for it in items:
        if isinstance(it, dict) and 'name' in it:
            yield it['name'], it.get('data')
        elif isinstance(it, (list, tuple)) and len(it) >= 2:
            yield it[0], it[1]
        else:
            raise ValueError("Bad item: %r" % (it,))

def pack_iter_msf(items, outfile=None, formatspecs=None, verbose=False):
    fs = _ensure_formatspecs(formatspecs)
    entries = []
    blobs = []
    for name, data in _iter_items(items):
        if data is None:
            data = b''
        elif isinstance(data, str):
            data = data.encode('utf-8')
        blobs.append(data)
        if isinstance(name, str):
            name = name.replace('\\', '/')
        entries.append(_make_entry(len(entries), name, len(data)))
    _warn_duplicates(entries)

    def fetch(ent, copybuf):
        data = blobs[ent['fid']]
        copybuf[:len(data)] = data

    return _emit_archive(entries, outfile, fs, fetch, verbose)

# ------------- unpacking -------------

def _ensure_dirs(path, mode=MODE_DIR_DEFAULT):
    """Create each missing ancestor directory of a file path.

    Best-effort: failures are returned as (dirpath, error) pairs rather than
    raised, since opening the file itself is what decides success.
    """
    failures = []
    seps = (os.sep, os.altsep) if os.altsep else (os.sep,)
    for i, ch in enumerate(path):
        if ch not in seps or i == 0:
            continue
        d = path[:i]
        if os.path.isdir(d):
            continue
        try:
            os.mkdir(d, mode)
        except (OSError, ValueError) as e:
            failures.append((d, e))
    return failures

def unpack_msf(infile, outdir='.', formatspecs=None, verbose=False):
    fs = _ensure_formatspecs(formatspecs)
    fp, need_close = _open_in(infile)
    try:
        numfiles, entries = _read_table(fp, fs)
        arr = {
            'fnumfiles': numfiles,
            'fdatastart': fp.tell(),
            'farchivesize': _archive_size(fp),
            'ffilelist': entries,
        }
        _check_bounds(arr)
        result = {} if outdir in (None, '-', b'-') else None

        _report(verbose, "unpacking %d files:" % numfiles)
        copybuf = None
        for ent in entries:
            _report(verbose, "... %s" % ent['fname'])
            # ensure copy buffer is large enough
            copybuf = _grow_buffer(copybuf, ent['fsize'], fs['buffer_slack'])
            fp.seek(ent['foffset'], os.SEEK_SET)
            if _copy_into(copybuf, fp, ent['fsize']) != ent['fsize']:
                raise FormatError("truncated data for `%s`" % ent['fname'])
            data = memoryview(copybuf)[:ent['fsize']]
            if result is not None:
                result[ent['fname']] = bytes(data)
                continue

            path = os.path.join(outdir, *ent['fname'].split('/'))
            for d, err in _ensure_dirs(path):
                if not (isinstance(err, FileExistsError) and os.path.isdir(d)):
                    _warn("could not create directory `%s`: %s" % (d, err.strerror or err))
            try:
                with io.open(path, 'wb') as fout:
                    fout.write(data)
            except OSError as e:
                raise MSFIOError("could not open `%s` for writing: %s" % (path, e.strerror or e)) from e
        if result is not None:
            return result
        return True
    finally:
        if need_close:
            fp.close()

# ------------- listing / validation -------------

def archivefilelistfiles_msf(infile, formatspecs=None, advanced=False):
    arr = archive_to_array_msf(infile, formatspecs=formatspecs)
    out = []
    for ent in arr['ffilelist']:
        if not advanced:
            out.append(ent['fname'])
        else:
            out.append({
                'name': ent['fname'],
                'offset': ent['foffset'],
                'size': ent['fsize'],
            })
    return out

def archivefilevalidate_msf(infile, formatspecs=None, return_details=False):
    try:
        arr = archive_to_array_msf(infile, formatspecs=formatspecs)
    except BadMagicError:
        raise
    except FormatError as e:
        if return_details:
            return False, [{'index': None, 'name': None, 'bounds_ok': False, 'contiguous_ok': False, 'error': str(e)}]
        return False
    ok = True
    details = []
    expect = arr['fdatastart']
    for ent in arr['ffilelist']:
        end = ent['foffset'] + ent['fsize']
        bounds_ok = end <= arr['farchivesize'] and _is_safe_name(os.fsencode(ent['fname']))
        contiguous_ok = ent['foffset'] == expect
        expect = end
        ok = ok and bounds_ok and contiguous_ok
        details.append({'index': ent['fid'], 'name': ent['fname'],
                        'bounds_ok': bounds_ok, 'contiguous_ok': contiguous_ok, 'error': None})
    if ok and expect != arr['farchivesize']:
        ok = False
        details.append({'index': None, 'name': None, 'bounds_ok': True, 'contiguous_ok': False,
                        'error': "%d trailing bytes after data" % (arr['farchivesize'] - expect)})
    if return_details:
        return ok, details
    return ok

# ------------- empty archive helpers (_msf) -------------

def make_empty_file_msf(outfile=None, formatspecs=None):
    fs = _ensure_formatspecs(formatspecs)
    return _emit_archive([], outfile, fs, None)

def make_empty_archive_file_msf(outfile=None, formatspecs=None):
    return make_empty_file_msf(outfile, formatspecs)
