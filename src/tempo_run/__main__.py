from tempo_run.cli import main

main()
