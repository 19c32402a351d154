"""
Performance demonstration for coarse intensity grids.

The intensity heatmap always measures the delta at full resolution; the
sample scale only widens the tile grid. This script times the analysis at
a few grid scales next to the full-resolution differential map. Run it to
see the numbers on your system.
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import time
from PIL import Image, ImageDraw

from VD_Libs.CompareLib.alignment import resolve_alignment
from VD_Libs.CompareLib.differential_mapper import compute_differential
from VD_Libs.CompareLib.intensity_analyzer import analyze_intensity
from VD_Libs.CompareLib.pixel_buffers import descriptor_of, extract_buffer_pair


def build_pair(size):
    """An original and an edited copy with a painted square and a cropped border."""
    original = Image.new("RGBA", (size, size), (200, 100, 50, 255))
    edited = original.crop((0, size // 8, size, size - size // 8))
    ImageDraw.Draw(edited).rectangle(
        [size // 4, size // 4, size // 2, size // 2], fill=(20, 20, 240, 255)
    )
    return original, edited


def benchmark_intensity(size, sample_scale, iterations=3):
    original, edited = build_pair(size)
    transform = resolve_alignment(descriptor_of(original), descriptor_of(edited))

    times = []
    blocks = []
    for _ in range(iterations):
        start = time.time()
        pair = extract_buffer_pair(original, edited, transform)
        blocks = analyze_intensity(
            pair.original, pair.edited, pair.overlap, sample_scale=sample_scale
        )
        times.append(time.time() - start)

    avg = sum(times) / len(times)
    print(f"  scale {sample_scale:<5} avg {avg:.3f}s  blocks: {len(blocks)}")
    return avg


def benchmark_differential(size, iterations=3):
    original, edited = build_pair(size)
    transform = resolve_alignment(descriptor_of(original), descriptor_of(edited))

    times = []
    for _ in range(iterations):
        start = time.time()
        pair = extract_buffer_pair(original, edited, transform)
        compute_differential(pair.original, pair.edited, pair.overlap)
        times.append(time.time() - start)

    avg = sum(times) / len(times)
    print(f"  differential (full res) avg {avg:.3f}s")
    return avg


def main():
    print("=" * 60)
    print("Intensity grid scale benchmark")
    print("=" * 60)

    for size in (512, 2048):
        print(f"\n{size}x{size} original")
        print("-" * 60)
        full = benchmark_intensity(size, 1.0)
        reduced = benchmark_intensity(size, 0.25)
        benchmark_differential(size)
        if reduced > 0:
            print(f"  Speedup from the 0.25 grid: {full / reduced:.1f}x")


if __name__ == "__main__":
    main()
