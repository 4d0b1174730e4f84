from gpxkit.cli import main

main()
