import argparse
import logging
import sys

from config import load_config
from app.pipeline import AuditPipeline
from domain.errors import SettingsError
from infra.log_source import read_log_text
from infra.nonconformities_csv_sink import CsvNonConformityWriter
from infra.sinks import PrintSink

EXIT_OK = 0
EXIT_NO_ROUNDS = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Auditoria de rondas: aponta não conformidades em relatórios de ronda."
    )
    parser.add_argument("log_file", help="relatório exportado do coletor ('-' para stdin)")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--csv", default=None, help="exporta as não conformidades em CSV")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config)
    except (OSError, SettingsError) as e:
        raise SystemExit(str(e))

    # --csv tem precedência sobre export.csv_path do YAML
    csv_path = args.csv or (cfg.export.csv_path if cfg.export is not None else None)
    writer = None
    if csv_path:
        flush_n = cfg.export.flush_every_n if cfg.export is not None else 200
        writer = CsvNonConformityWriter(csv_path, flush_every_n=flush_n)

    pipeline = AuditPipeline(
        cfg.audit,
        sink=PrintSink(top_n=cfg.report.top_n),
        export_sink=writer,
    )

    try:
        log_text = read_log_text(args.log_file)
    except OSError as e:
        raise SystemExit(f"Não foi possível ler o relatório '{args.log_file}': {e}")

    try:
        result = pipeline.run(log_text)
    finally:
        if writer is not None:
            writer.close()

    if writer is not None:
        print(f"[export] {writer.total_written} linha(s) -> {csv_path}")

    # relatório sem nenhuma ronda é erro de formato, não "tudo conforme"
    if result.is_empty_log:
        return EXIT_NO_ROUNDS
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
