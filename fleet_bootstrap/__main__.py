"""Run the fleet-bootstrap command line tool."""

from fleet_bootstrap.tool.fleet_bootstrap import main

if __name__ == "__main__":
    main()
