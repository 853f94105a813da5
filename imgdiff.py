import os
import sys

os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")

from argparse import ArgumentParser

from multibrot import CodecError, compare
from multibrot import codec


def build_parser():
    parser = ArgumentParser(
        description='Count the pixels that differ between two images. '
                    'Exits with status 0 only when the images are identical.')
    parser.add_argument('path', help='path of the primary image')
    parser.add_argument('other_path', help='path of the secondary image')
    return parser


def main(argv=None) -> int:
    opt = build_parser().parse_args(argv)

    try:
        image = codec.load(opt.path)
        other_image = codec.load(opt.other_path)
    except CodecError as exc:
        print(f"imgdiff: {exc}", file=sys.stderr)
        return 1

    result = compare(image, other_image)
    print("Difference")
    print(f"\tCount: {result.count}")
    print(f"\tPrimary Ratio: {result.primary_ratio:f}")
    print(f"\tSecondary Ratio: {result.secondary_ratio:f}")

    return 0 if result.identical else 1


if __name__ == '__main__':
    sys.exit(main())
