# depbuild_targets.py
# Example targets file: depbuild --targets-file depbuild_targets.py
from __future__ import annotations

from depbuild.dsl import cmake, sh, target


def targets():
    return [
        # protobuf, same recipe as the built-in target
        target(
            "protobuf",
            cmake(definitions={"protobuf_BUILD_TESTS": "OFF", "ABSL_PROPAGATE_CXX_STD": "ON"}),
        ),

        # zlib from a non-default checkout location
        target(
            "zlib",
            cmake(definitions={"ZLIB_BUILD_EXAMPLES": "OFF"}),
            source_dir="third_party/zlib",
        ),

        # autotools project: nasm needs to be on PATH for the asm parts
        target(
            "x264",
            sh(
                '"$SOURCEPATH/configure" --prefix="$OUTPATH" --enable-static --disable-cli\n'
                'make -j"$JOBS"\n'
                "make install\n"
            ),
            check_file="configure",
        ),
    ]
