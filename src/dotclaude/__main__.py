from dotclaude.cli import main

main()
