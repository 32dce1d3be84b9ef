from charme_annotator.cli import main

main()
