from woofsearch.cli.main import main

main()
