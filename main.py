import argparse

from draftink.api import create_app
from draftink.utils import configure_logging


def main():
    """
    Run the drafts API server.
    Storage root and template registry can be passed on the command line.
    """
    parser = argparse.ArgumentParser(description="Draftink drafts API server")
    parser.add_argument('--storage-root', help='Directory for drafts, drawings and exports')
    parser.add_argument('--templates', help='JSON registry of template PDFs')
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=5000)
    parser.add_argument('--serialize-versions', action='store_true',
                        help='Serialize version assignment per user and template')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default='INFO')
    args = parser.parse_args()

    configure_logging(args.log_level)

    config = {'SERIALIZE_DRAFT_VERSIONS': args.serialize_versions}
    if args.storage_root:
        config['STORAGE_ROOT'] = args.storage_root
    if args.templates:
        config['TEMPLATES_FILE'] = args.templates

    app = create_app(config=config)
    app.run(host=args.host, port=args.port)


if __name__ == '__main__':
    main()
