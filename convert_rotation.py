import argparse
import logging
import os

from xivcombat.rotation import Rotation

logger = logging.getLogger(__name__)


def convert_to_rotation_json(file_path, output_dir="output", name=None):
    """Convert an ``id|time`` action log into a rotation JSON file."""
    file_name = os.path.splitext(os.path.basename(file_path))[0]
    output_file = os.path.join(output_dir, f"{file_name}.json")

    with open(file_path, "r", encoding="utf-8") as file:
        rotation = Rotation.from_log_text(file.read(), name=name or file_name)

    os.makedirs(output_dir, exist_ok=True)
    rotation.save_to_file(output_file)
    logger.info("Rotation with %d steps saved to %s", len(rotation), output_file)

    return output_file


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Convert an action log to a rotation JSON file")
    parser.add_argument("log_file")
    parser.add_argument("--output-dir", default="output")
    parser.add_argument("--name", default=None, help="rotation name, defaults to the file name")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    convert_to_rotation_json(args.log_file, output_dir=args.output_dir, name=args.name)
