from pipeup.cli import main

main()
