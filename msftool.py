#!/usr/bin/env python
# -*- coding: utf-8 -*-
import sys, argparse, configparser

__program_name__ = "msftool"

try:
    import pymsf as P
except Exception as e:
    raise SystemExit("Failed to import core module 'pymsf': %s" % (e,))

def main(argv=None):
    p = argparse.ArgumentParser(prog=__program_name__, description="Pack a directory into an MSF archive, or unpack one")
    p.add_argument('command', choices=('pack', 'unpack', 'list', 'validate'), help='Operation to run')
    p.add_argument('archive', help='MSF archive path')
    p.add_argument('directory', nargs='?', default=None, help='Directory to pack from or unpack into')

    args = p.parse_args(argv)

    if args.command in ('pack', 'unpack') and args.directory is None:
        p.error("%s requires <archive-path> <directory-path>" % args.command)
    if args.command in ('list', 'validate') and args.directory is not None:
        p.error("%s takes only <archive-path>" % args.command)

    try:
        if args.command == 'pack':
            P.pack_msf(args.directory, outfile=args.archive, verbose=True)
            return 0

        if args.command == 'unpack':
            P.unpack_msf(args.archive, args.directory, verbose=True)
            return 0

        if args.command == 'list':
            for e in P.archivefilelistfiles_msf(args.archive, advanced=True):
                e['name'] = P.printable_name(e['name'])
                print("{offset}\t{size}\t{name}".format(**e))
            return 0

        if args.command == 'validate':
            ok, details = P.archivefilevalidate_msf(args.archive, return_details=True)
            print("OK" if ok else "BAD")
            for d in details:
                if d['error'] or not (d['bounds_ok'] and d['contiguous_ok']):
                    if d['name'] is not None:
                        d['name'] = P.printable_name(d['name'])
                    print("{index}\t{name}\t{bounds_ok}\t{contiguous_ok}\t{error}".format(**d))
            return 0 if ok else 1
    except (P.MSFError, ValueError, configparser.Error) as e:
        sys.stderr.write("error: %s\n" % (e,))
        return 1

if __name__ == "__main__":
    sys.exit(main())
