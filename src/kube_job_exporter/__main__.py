from kube_job_exporter.cli.main import main

main()
