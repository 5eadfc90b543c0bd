import json
import logging
import sys
import argparse

from pydantic import ValidationError

from core.config_loader import load_config
from core.llm import OpenAIService
from etl.documents import DocumentReader, DocumentReadError
from etl.orchestrator import ExtractionOrchestrator
from etl.schema_models import StructuredResume

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def load_resume_data(resume_file_path: str) -> StructuredResume | None:
    """Load a previously extracted résumé from a JSON file."""
    logger.info(f"Loading resume from {resume_file_path}")
    try:
        with open(resume_file_path, 'r', encoding='utf-8') as f:
            return StructuredResume.model_validate(json.load(f))
    except FileNotFoundError:
        logger.error(f"Resume file not found: {resume_file_path}")
        return None
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in resume file: {e}")
        return None
    except ValidationError as e:
        logger.error(f"Resume file does not match the résumé structure: {e}")
        return None


def write_output(payload, output_path: str | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output_path:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text + "\n")
        logger.info(f"Wrote result to {output_path}")
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract structured data from résumés and job descriptions")
    parser.add_argument('command', choices=['resume', 'job', 'titles'],
                        help='resume: extract a résumé; job: extract a job description; '
                             'titles: suggest job titles for an extracted résumé JSON')
    parser.add_argument('file', help='Input document (.pdf, .docx, .txt, .md) or résumé JSON for "titles"')
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--output', '-o', type=str, default=None, help='Write JSON here instead of stdout')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable DEBUG logging')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)
    orchestrator = ExtractionOrchestrator(OpenAIService(config.llm), config)
    logger.info(f"Running '{args.command}' with {config.llm.provider}/{config.llm.model}")

    if args.command == 'titles':
        resume = load_resume_data(args.file)
        if resume is None:
            return 1
        write_output(orchestrator.suggest_job_titles(resume), args.output)
        return 0

    try:
        document = DocumentReader().read(args.file)
    except (FileNotFoundError, DocumentReadError) as e:
        logger.error(f"Could not read {args.file}: {e}")
        return 1

    if args.command == 'resume':
        result = orchestrator.extract_resume(document.text)
    else:
        result = orchestrator.extract_job_description(document.text)

    write_output(result.to_dict(), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
