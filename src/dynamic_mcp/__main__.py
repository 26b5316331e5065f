from dynamic_mcp.cli import main

main()
