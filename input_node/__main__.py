from input_node.main import main

main()
