"""
Command Line Interface for page OCR
"""

import argparse
import sys
from pathlib import Path

from .libs.onnx_ocr.config import DETECTOR_ARCHITECTURES, RECOGNIZER_ARCHITECTURES
from .pipeline import EngineConfig, OcrEngine, TextPositioning
from .text_builder import build_text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="page-ocr",
        description="Recognize text in page images with ONNX OCR models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the text of a scanned page
  page-ocr scan.png --det-model db_resnet50.onnx --rec-model crnn_vgg16.onnx

  # Multi-page TIFF with orientation correction, saved to a file
  page-ocr pages.tiff --det-model det.onnx --rec-model rec.onnx \\
      --orientation-model orientation.onnx -o pages.txt

  # PARSeq recognition on GPU
  page-ocr scan.png --det-model det.onnx --rec-model parseq.onnx --rec-arch parseq --gpu
        """
    )

    # Input/Output
    parser.add_argument(
        'inputs',
        nargs='+',
        help='Input image files (multi-frame TIFF pages are all processed)'
    )
    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output text file (default: print to stdout)'
    )

    # Model options
    parser.add_argument(
        '--det-model',
        required=True,
        help='Text detection ONNX model'
    )
    parser.add_argument(
        '--rec-model',
        required=True,
        help='Text recognition ONNX model'
    )
    parser.add_argument(
        '--orientation-model',
        default=None,
        help='Text orientation ONNX model (default: assume horizontal text)'
    )
    parser.add_argument(
        '--det-arch',
        default='db_net',
        choices=sorted(DETECTOR_ARCHITECTURES),
        help='Detection model family (default: db_net)'
    )
    parser.add_argument(
        '--rec-arch',
        default='crnn_vgg16',
        choices=sorted(RECOGNIZER_ARCHITECTURES),
        help='Recognition model family (default: crnn_vgg16)'
    )

    # Processing options
    parser.add_argument(
        '--by-lines',
        action='store_true',
        help='Give words of one line the same box height'
    )
    parser.add_argument(
        '--gpu',
        action='store_true',
        help='Enable CUDA GPU acceleration'
    )
    parser.add_argument(
        '--tensorrt',
        action='store_true',
        help='Enable TensorRT acceleration'
    )

    # Verbosity
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    return parser


def main(argv=None):
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)

    # Validate input files
    input_paths = [Path(name) for name in args.inputs]
    for input_path in input_paths:
        if not input_path.exists():
            print(f"Error: Input file '{input_path}' not found", file=sys.stderr)
            return 1

    output_path = Path(args.output) if args.output else None
    accel = {'use_gpu': args.gpu, 'use_tensorrt': args.tensorrt}

    # Print configuration
    if args.verbose:
        print("=" * 70)
        print("Page OCR CLI")
        print("=" * 70)
        print(f"Inputs: {', '.join(str(p) for p in input_paths)}")
        print(f"Output: {output_path or 'stdout'}")
        print(f"Detection: {args.det_arch} ({args.det_model})")
        print(f"Recognition: {args.rec_arch} ({args.rec_model})")
        print(f"Orientation: {args.orientation_model or 'Disabled'}")
        print("=" * 70)
        print()

    try:
        if args.verbose:
            print("Initializing engine...")

        engine = OcrEngine.from_model_paths(
            args.det_model,
            args.rec_model,
            cls_model_path=args.orientation_model,
            det_config=DETECTOR_ARCHITECTURES[args.det_arch](**accel),
            rec_config=RECOGNIZER_ARCHITECTURES[args.rec_arch](**accel),
            config=EngineConfig(
                text_positioning=TextPositioning.BY_LINES if args.by_lines else TextPositioning.BY_WORDS
            ),
            verbose=args.verbose,
        )

        if args.verbose:
            print("Engine ready!")
            print()

        with engine:
            if output_path is not None:
                text = engine.create_txt_file(input_paths, output_path)
            else:
                parts = []
                for input_path in input_paths:
                    if args.verbose:
                        print(f"Processing: {input_path.name}")
                    parts.append(build_text(engine.do_image_ocr(input_path)))
                text = "".join(parts)
                sys.stdout.write(text)

        if args.verbose:
            print(f"\nTotal length: {len(text)} characters")
            print("=" * 70)
            print("Processing complete!")
        elif output_path is not None:
            print(f"Saved to: {output_path}")

        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
